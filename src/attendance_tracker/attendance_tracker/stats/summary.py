from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus


def round_half_up(value: float, places: int = 1) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class RecordSummary:
    """Per-subject totals shown next to "my records"."""

    total_days: int = 0
    present_days: int = 0
    late_days: int = 0
    half_days: int = 0
    total_hours: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_days": self.total_days,
            "present_days": self.present_days,
            "late_days": self.late_days,
            "half_days": self.half_days,
            "total_hours": self.total_hours,
        }


def summarize_records(records: Iterable[AttendanceRecord]) -> RecordSummary:
    total = present = late = half = 0
    hours = Decimal(0)
    for r in records:
        total += 1
        hours += Decimal(str(r.elapsed_hours or 0))
        if r.status == AttendanceStatus.PRESENT:
            present += 1
        elif r.status == AttendanceStatus.LATE:
            late += 1
        elif r.status == AttendanceStatus.HALF_DAY:
            half += 1
    return RecordSummary(
        total_days=total,
        present_days=present,
        late_days=late,
        half_days=half,
        total_hours=float(hours),
    )


@dataclass
class EmployeePerformance:
    subject_id: str
    display_name: str
    employee_code: Optional[str] = None
    total_days: int = 0
    present_days: int = 0
    late_days: int = 0
    half_days: int = 0
    total_hours: float = 0.0

    @property
    def presence_ratio(self) -> float:
        return self.present_days / self.total_days if self.total_days else 0.0

    def add(self, record: AttendanceRecord) -> None:
        self.total_days += 1
        self.total_hours = float(Decimal(str(self.total_hours)) + Decimal(str(record.elapsed_hours or 0)))
        if record.status == AttendanceStatus.PRESENT:
            self.present_days += 1
        elif record.status == AttendanceStatus.LATE:
            self.late_days += 1
        elif record.status == AttendanceStatus.HALF_DAY:
            self.half_days += 1

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "display_name": self.display_name,
            "employee_code": self.employee_code,
            "total_days": self.total_days,
            "present_days": self.present_days,
            "late_days": self.late_days,
            "half_days": self.half_days,
            "total_hours": self.total_hours,
        }


@dataclass
class DailyBreakdown:
    day: date
    present: int = 0
    late: int = 0
    half_day: int = 0
    absent: int = 0

    def add(self, status: AttendanceStatus) -> None:
        if status == AttendanceStatus.PRESENT:
            self.present += 1
        elif status == AttendanceStatus.LATE:
            self.late += 1
        elif status == AttendanceStatus.HALF_DAY:
            self.half_day += 1
        else:
            self.absent += 1

    def to_dict(self) -> dict:
        return {
            "date": self.day.strftime("%Y-%m-%d"),
            "present": self.present,
            "late": self.late,
            "half_day": self.half_day,
            "absent": self.absent,
        }


@dataclass(frozen=True)
class StatsSummary:
    start: date
    end: date
    total_records: int
    total_employees: int
    active_employees: int
    attendance_rate: float
    total_hours: float
    average_hours: float
    status_breakdown: dict
    chart_data: list = field(default_factory=list)
    top_performers: list = field(default_factory=list)
    period: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "overview": {
                "total_records": self.total_records,
                "total_employees": self.total_employees,
                "active_employees": self.active_employees,
                "attendance_rate": self.attendance_rate,
                "total_hours": self.total_hours,
                "average_hours": self.average_hours,
            },
            "status_breakdown": dict(self.status_breakdown),
            "chart_data": [d.to_dict() for d in self.chart_data],
            "top_performers": [p.to_dict() for p in self.top_performers],
            "period": self.period,
            "start_date": self.start.strftime("%Y-%m-%d"),
            "end_date": self.end.strftime("%Y-%m-%d"),
        }
