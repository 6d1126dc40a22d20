from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Short day; wins over lateness."""

    def decide_checkout(self, *, check_in: datetime, check_out: datetime, elapsed_hours: float) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY)
