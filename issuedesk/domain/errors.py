"""
errors.py - Domain exceptions
Single responsibility: name the failures callers are expected to handle.
"""


class IssueDeskError(Exception):
    """Base class for all application errors."""


class ValidationError(IssueDeskError, ValueError):
    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class EscalationPendingError(IssueDeskError, ValueError):
    """Raised when a new layer is requested while the latest one is not Done."""


class NotFoundError(IssueDeskError, LookupError):
    pass


class EditorStateError(IssueDeskError, RuntimeError):
    """Illegal transition of the editing session (e.g. opening a second draft)."""


class StorageError(IssueDeskError):
    """The storage collaborator (SQLite snapshot or REST API) failed."""
