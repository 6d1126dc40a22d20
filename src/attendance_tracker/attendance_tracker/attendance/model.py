from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Generic, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_LOCATION
from ..core.enums import AttendanceStatus

T = TypeVar("T")


@dataclass(frozen=True)
class PunchDetails:
    """One side of a day: when and where the subject clocked."""

    timestamp: datetime
    location: str = DEFAULT_LOCATION
    origin_address: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one subject's attendance for one calendar day.

    ``display_name`` and ``employee_code`` are snapshots taken at check-in.
    ``status`` and ``elapsed_hours`` only change at checkout.
    """

    record_id: str
    subject_id: str
    display_name: str
    day: date
    check_in: PunchDetails
    check_out: Optional[PunchDetails] = None
    elapsed_hours: float = 0.0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    remarks: Optional[str] = None
    employee_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.check_out is None


@dataclass(frozen=True)
class RecordFilter:
    """Query over stored records; every criterion is optional."""

    subject_id: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None
    status: Optional[AttendanceStatus] = None
    search: Optional[str] = None

    def matches(self, record: AttendanceRecord) -> bool:
        if self.subject_id is not None and record.subject_id != self.subject_id:
            return False
        if self.start is not None and record.day < self.start:
            return False
        if self.end is not None and record.day > self.end:
            return False
        if self.status is not None and record.status != self.status:
            return False
        if self.search and self.search.lower() not in record.display_name.lower():
            return False
        return True


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    @property
    def has_next_page(self) -> bool:
        return (self.page - 1) * self.page_size + self.page_size < self.total

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            "total_records": self.total,
            "has_next_page": self.has_next_page,
            "has_prev_page": self.has_prev_page,
        }


@dataclass(frozen=True)
class TodayStatus:
    checked_in: bool
    checked_out: bool
    record: Optional[AttendanceRecord] = None
