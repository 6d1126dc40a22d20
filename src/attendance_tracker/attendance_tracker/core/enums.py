from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role supplied by the identity layer."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Day classification stored with every record."""

    PRESENT = "present"
    LATE = "late"
    HALF_DAY = "half-day"
    ABSENT = "absent"


class EventKind(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class StatsPeriod(str, Enum):
    """Named windows accepted by the admin statistics endpoint."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class StoreBackend(str, Enum):
    MYSQL = "mysql"
    MEMORY = "memory"
