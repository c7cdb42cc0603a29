"""
Wellness DAO Exceptions

Base exception classes shared by the governance stack. Component-specific
errors (governance, voting, treasury) live next to their components and
derive from WellnessDAOException.
"""


class WellnessDAOException(Exception):
    """
    Base exception for the DAO.

    Every domain failure carries a stable numeric ``code`` so it can be
    reported through an ExecResult without losing its identity.
    """

    code: int = 0

    def __init__(self, code: int, message: str = ""):
        self.code = int(code)
        self.message = message or f"error {self.code}"
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} code={self.code} {self.message!r}>"


class LedgerError(WellnessDAOException):
    """Failure reported by the token ledger."""


class ConfigurationError(Exception):
    """Configuration error."""
    pass
