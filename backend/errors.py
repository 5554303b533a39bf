# Domain errors - raised by the store, repositories and services, mapped to HTTP codes in main.py


class SafetyNetError(Exception):
    """Base class for every error the core raises."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SafetyNetError):
    """Malformed, missing or negative input. Always checked before any lookup."""


class ConflictError(SafetyNetError):
    """A create targets an identity that already exists."""


class NotFoundError(SafetyNetError):
    """An update or query found no matching data where that is an error."""


class DataIntegrityError(SafetyNetError):
    """A cross-referenced record (usually a medical record) is missing from the stored data."""


class StorageError(SafetyNetError):
    """The backing data file could not be read or written."""
