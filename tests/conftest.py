from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.attendance_tracker.attendance_tracker.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.attendance_tracker.attendance_tracker.attendance.service import AttendanceService
from src.attendance_tracker.attendance_tracker.core.enums import Role
from src.attendance_tracker.attendance_tracker.realtime.notifier import RealtimeNotifier
from src.attendance_tracker.attendance_tracker.users.model import Identity

UTC = ZoneInfo("UTC")


class RecordingTransport:
    def __init__(self):
        self.sent: list[tuple[object, str, dict]] = []

    def send(self, connection, event, payload):
        self.sent.append((connection, event, payload))


def _at(hour: int, minute: int = 0, second: int = 0, *, day: int = 2, tz=UTC) -> datetime:
    """Timestamp on Feb <day> 2026 in ``tz``."""
    return datetime(2026, 2, day, hour, minute, second, tzinfo=tz)


@pytest.fixture
def fixed_now() -> datetime:
    return _at(8, 30)


@pytest.fixture
def employee() -> Identity:
    return Identity(subject_id="u-1", display_name="Alice Nguyen", role=Role.EMPLOYEE, department="IT", employee_code="EMP001")


@pytest.fixture
def admin() -> Identity:
    return Identity(subject_id="u-admin", display_name="Admin Demo", role=Role.ADMIN, department="HR")


@pytest.fixture
def attendance_repo() -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def notifier(transport) -> RealtimeNotifier:
    return RealtimeNotifier(transport)


@pytest.fixture
def service(attendance_repo, notifier) -> AttendanceService:
    return AttendanceService(attendance_repo, tz=UTC, notifier=notifier)


@pytest.fixture
def at():
    return _at
