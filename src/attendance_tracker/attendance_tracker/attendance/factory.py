from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

from ..common.datetime_utils import whole_minutes_between
from ..core.constants import HALF_DAY_HOURS, LATE_CUTOFF
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


def compute_elapsed_hours(check_in: datetime, check_out: datetime) -> float:
    """Whole minutes between the punches, as hours rounded half-up to 2 places."""
    minutes = whole_minutes_between(check_in, check_out)
    hours = (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(hours)


def is_late(check_in: datetime, cutoff: time = LATE_CUTOFF) -> bool:
    """Strictly after the cutoff, compared at minute precision (09:30:59 is on time)."""
    return check_in.hour > cutoff.hour or (check_in.hour == cutoff.hour and check_in.minute > cutoff.minute)


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    ``check_in`` must already be expressed in the reference timezone.
    """

    half_day_hours: float = HALF_DAY_HOURS
    late_cutoff: time = LATE_CUTOFF

    def for_checkin(self) -> AttendanceStrategy:
        return NormalStrategy()

    def for_checkout(self, *, check_in: datetime, elapsed_hours: float) -> AttendanceStrategy:
        if elapsed_hours < self.half_day_hours:
            return HalfDayStrategy()
        if is_late(check_in, self.late_cutoff):
            return LateStrategy()
        return NormalStrategy()
