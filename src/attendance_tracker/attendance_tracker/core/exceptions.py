from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..attendance.model import AttendanceRecord


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when no authenticated identity is available."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class AttendanceConflictError(DomainError):
    """A check-in/check-out clashed with the stored state of the day.

    The conflicting record (if any) is attached so callers can render the
    current state without another lookup.
    """

    default_message = "Attendance conflict."

    def __init__(self, message: Optional[str] = None, *, record: Optional["AttendanceRecord"] = None):
        super().__init__(message or self.default_message)
        self.record = record


class DuplicateCheckInError(AttendanceConflictError):
    default_message = "You have already checked in today."


class NotCheckedInError(AttendanceConflictError):
    default_message = "No check-in record found for today. Please check-in first."


class AlreadyCheckedOutError(AttendanceConflictError):
    default_message = "You have already checked out today."


class StorageError(Exception):
    """The record store could not be reached or failed a statement."""


class DuplicateRecordError(StorageError):
    """The store rejected a second record for the same subject and day."""
