"""Core records, storage and services for work hours tracking."""

from timesheet.core.categories import CategoryTable
from timesheet.core.errors import (
    AuthenticationError,
    PermissionDeniedError,
    TimesheetError,
    ValidationError,
)
from timesheet.core.models import TimeEntry, User, Viewer

__all__ = [
    "CategoryTable",
    "TimeEntry",
    "User",
    "Viewer",
    "TimesheetError",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
]
