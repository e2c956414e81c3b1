"""Exception hierarchy raised by the patcher.

Every error aborts the whole run; nothing is rolled back beyond what the
caller's own persistence does.
"""


class PatcherError(Exception):
    """Base class for all fatal patcher errors."""


class ConfigurationError(PatcherError):
    """Settings are missing or name an unknown randomization type."""


class DataUnavailableError(PatcherError):
    """No source records could be loaded."""


class PoolExhaustionError(PatcherError):
    """A retrieval was attempted on an empty pool or an exhausted group list."""


class PoolInsufficientError(PatcherError):
    """The pool cannot supply enough distinct effects to fill a record."""

    def __init__(self, message: str, *, record_id: str | None = None, attempts: int = 0) -> None:
        super().__init__(message)
        self.record_id = record_id
        self.attempts = attempts
