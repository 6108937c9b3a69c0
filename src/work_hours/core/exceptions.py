"""Exception taxonomy for registry and ledger operations.

Every error derives from ``WorkHoursError`` which itself is a ``ValueError``,
so callers that only care about "the operation was rejected" can keep
catching ``ValueError``.
"""

from typing import Optional


class WorkHoursError(ValueError):
    """Base class for rejected operations."""


class UnauthenticatedError(WorkHoursError):
    """No user identity was supplied for a write operation."""

    def __init__(self, operation: str):
        super().__init__(f"Called {operation} without authentication present")
        self.operation = operation


class NotAuthorizedError(WorkHoursError):
    """The user does not own the referenced record."""


class NotFoundError(WorkHoursError):
    """The referenced record does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class ConflictError(WorkHoursError):
    """The operation conflicts with the current state of a record."""


class InvalidEntryError(WorkHoursError):
    """Input values failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
