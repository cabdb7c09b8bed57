"""Domain-specific exceptions for the expense ledger engine."""


class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field} {reason}")
        self.field = field
        self.reason = reason


class NotFoundError(LookupError):
    """Raised when an expense record or category cannot be located."""


class DuplicateError(ValueError):
    """Raised when a generated category id collides with an existing one."""


class LedgerImportError(ValueError):
    """Raised when interchange text is structurally unreadable."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""
