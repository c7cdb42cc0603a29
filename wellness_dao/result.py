"""
Execution results and the transaction wrapper.

Every public mutating operation of a controller returns an ExecResult: either
``ok`` with a value, or a failure carrying the numeric error code of the
component that rejected the call. Internally the controllers raise typed
exceptions; ``transaction`` snapshots the component state before the call,
converts a domain exception into a failed result and restores the snapshot,
so a failed call never leaves partial state behind.
"""

import functools
from typing import Any, Callable, Optional

from .exceptions import WellnessDAOException
from .logger import get_logger

logger = get_logger(__name__)


class ExecResult:
    """Result of executing a single controller operation."""

    __slots__ = ("ok", "value", "error", "message", "exception")

    def __init__(
        self,
        ok: bool = True,
        value: Any = None,
        error: Optional[int] = None,
        message: str = "",
        exception: Optional[WellnessDAOException] = None,
    ):
        self.ok = ok
        self.value = value
        self.error = error
        self.message = message
        self.exception = exception

    @classmethod
    def success(cls, value: Any = True) -> "ExecResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: WellnessDAOException) -> "ExecResult":
        return cls(ok=False, error=exc.code, message=exc.message, exception=exc)

    def unwrap(self) -> Any:
        """Return the value, or raise the exception that caused the failure."""
        if not self.ok:
            raise self.exception
        return self.value

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self):
        return {
            "ok": self.ok,
            "value": self.value,
            "error": self.error,
            "message": self.message,
        }

    def __repr__(self) -> str:
        if self.ok:
            return f"<ExecResult ok value={self.value!r}>"
        return f"<ExecResult err={self.error} {self.message!r}>"


def transaction(fn: Callable) -> Callable:
    """
    Run a controller method as one indivisible transaction.

    The owning object must provide ``take_snapshot()`` and
    ``restore_snapshot(snapshot)``. Domain failures become failed results;
    any other exception also restores the snapshot and is re-raised.
    """

    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs) -> ExecResult:
        snapshot = self.take_snapshot()
        try:
            value = fn(self, *args, **kwargs)
        except WellnessDAOException as exc:
            self.restore_snapshot(snapshot)
            logger.debug(
                f"{type(self).__name__}.{fn.__name__} rejected [err {exc.code}]: {exc.message}"
            )
            return ExecResult.failure(exc)
        except Exception:
            self.restore_snapshot(snapshot)
            logger.exception(f"{type(self).__name__}.{fn.__name__} aborted, state restored")
            raise
        return ExecResult.success(value)

    return wrapper
