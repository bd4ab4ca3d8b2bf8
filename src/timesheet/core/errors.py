"""Exception hierarchy for timesheet operations."""

from typing import Optional


class TimesheetError(Exception):
    """Base class for all timesheet errors."""


class ValidationError(TimesheetError, ValueError):
    """Raised when a record fails validation.

    Attributes:
        field: Name of the offending field (None for record-level errors)
        message: Human-readable description
    """

    def __init__(self, field: Optional[str], message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}" if field else message)


class AuthenticationError(TimesheetError):
    """Raised when credentials do not match a known user."""


class PermissionDeniedError(TimesheetError):
    """Raised when a viewer's role does not allow an action."""


class StorageError(TimesheetError, ValueError):
    """Raised when a stored record file cannot be read."""
