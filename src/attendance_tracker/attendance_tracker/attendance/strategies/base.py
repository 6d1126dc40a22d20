from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    def decide_checkin(self, *, check_in: datetime) -> StatusDecision:
        # A day stays "present" until checkout closes it.
        return StatusDecision(status=AttendanceStatus.PRESENT)

    @abstractmethod
    def decide_checkout(self, *, check_in: datetime, check_out: datetime, elapsed_hours: float) -> StatusDecision:
        raise NotImplementedError
