"""
Value checks shared by the controllers.

Amounts, budgets and parameters are plain ints; ``bool`` is an ``int``
subclass and is rejected explicitly.
"""

from typing import Any


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_positive_int(value: Any) -> bool:
    return is_int(value) and value > 0
