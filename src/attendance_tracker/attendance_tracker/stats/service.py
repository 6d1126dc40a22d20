from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local, period_range, to_local
from ..core.constants import TOP_PERFORMERS_LIMIT
from ..core.enums import AttendanceStatus, StatsPeriod
from ..core.exceptions import ValidationError
from ..users.repository import EmployeeDirectory
from .summary import DailyBreakdown, EmployeePerformance, StatsSummary, round_half_up

logger = logging.getLogger(__name__)


class StatsService:
    """Admin dashboard aggregates over a date range.

    Reads a snapshot of the store without locking, so figures may trail
    concurrent check-ins.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        tz: ZoneInfo,
        directory: Optional[EmployeeDirectory] = None,
        top_n: int = TOP_PERFORMERS_LIMIT,
    ):
        self._attendance = attendance
        self._directory = directory
        self._tz = tz
        self._top_n = int(top_n)

    def compute_aggregate_stats(self, start: date, end: date, *, period: Optional[str] = None) -> StatsSummary:
        if start > end:
            raise ValidationError("Start date must not be after end date")

        records = self._attendance.find_between(start, end)

        status_counts = {status: 0 for status in AttendanceStatus}
        total_hours = 0.0
        daily: dict[date, DailyBreakdown] = {}
        performers: dict[str, EmployeePerformance] = {}

        for r in records:
            status_counts[r.status] += 1
            total_hours += r.elapsed_hours or 0
            daily.setdefault(r.day, DailyBreakdown(day=r.day)).add(r.status)

            perf = performers.get(r.subject_id)
            if perf is None:
                perf = EmployeePerformance(
                    subject_id=r.subject_id,
                    display_name=r.display_name,
                    employee_code=r.employee_code,
                )
                performers[r.subject_id] = perf
            perf.add(r)

        total_records = len(records)
        active = len(performers)
        total_employees = self._count_employees(default=active)

        # sorted() is stable: equal ratios keep first-appearance order.
        ranked = sorted(performers.values(), key=lambda p: p.presence_ratio, reverse=True)

        return StatsSummary(
            start=start,
            end=end,
            period=period,
            total_records=total_records,
            total_employees=total_employees,
            active_employees=active,
            attendance_rate=round_half_up(active / total_employees * 100, 1) if total_employees else 0.0,
            total_hours=round_half_up(total_hours, 1),
            average_hours=round_half_up(total_hours / total_records, 1) if total_records else 0.0,
            status_breakdown={
                "present": status_counts[AttendanceStatus.PRESENT],
                "late": status_counts[AttendanceStatus.LATE],
                "half_day": status_counts[AttendanceStatus.HALF_DAY],
                "absent": max(0, total_employees - active),
            },
            chart_data=[daily[d] for d in sorted(daily)],
            top_performers=ranked[: self._top_n],
        )

    def stats_for_period(self, period: Union[str, StatsPeriod, None], *, now: Optional[datetime] = None) -> StatsSummary:
        try:
            resolved = StatsPeriod(period) if period else StatsPeriod.MONTH
        except ValueError:
            resolved = StatsPeriod.MONTH

        today = to_local(now or now_local(self._tz), self._tz).date()
        start, end = period_range(resolved, today)
        return self.compute_aggregate_stats(start, end, period=resolved.value)

    def _count_employees(self, *, default: int) -> int:
        if self._directory is None:
            return default
        return int(self._directory.count_active_employees())
