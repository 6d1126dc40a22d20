from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.attendance_tracker.attendance_tracker.attendance.model import AttendanceRecord, PunchDetails, RecordFilter
from src.attendance_tracker.attendance_tracker.core.enums import AttendanceStatus
from src.attendance_tracker.attendance_tracker.core.exceptions import DuplicateRecordError, StorageError


def _record(at, subject_id, name, day, *, hour=9, status=AttendanceStatus.PRESENT):
    ts = at(hour, 0, day=day)
    return AttendanceRecord(
        record_id="",
        subject_id=subject_id,
        display_name=name,
        day=ts.date(),
        check_in=PunchDetails(timestamp=ts),
        status=status,
    )


@pytest.fixture
def seeded(attendance_repo, at):
    rows = [
        _record(at, "u-1", "Alice Nguyen", 2),
        _record(at, "u-1", "Alice Nguyen", 3, status=AttendanceStatus.LATE),
        _record(at, "u-2", "Bob Tran", 3, hour=8),
        _record(at, "u-3", "Carol Le", 4, status=AttendanceStatus.HALF_DAY),
        _record(at, "u-2", "Bob Tran", 5),
    ]
    for r in rows:
        attendance_repo.insert(r)
    return attendance_repo


def test_insert_assigns_id_and_rejects_same_day(attendance_repo, at):
    stored = attendance_repo.insert(_record(at, "u-1", "Alice", 2))

    assert stored.record_id
    with pytest.raises(DuplicateRecordError):
        attendance_repo.insert(_record(at, "u-1", "Alice", 2, hour=11))


def test_update_unknown_record_is_storage_error(attendance_repo, at):
    with pytest.raises(StorageError):
        attendance_repo.update(replace(_record(at, "u-9", "Ghost", 2), record_id="nope"))


def test_query_sorts_newest_day_first_then_latest_checkin(seeded):
    rows, total = seeded.query(RecordFilter(), skip=0, limit=10)

    assert total == 5
    assert [(r.day.day, r.subject_id) for r in rows] == [(5, "u-2"), (4, "u-3"), (3, "u-1"), (3, "u-2"), (2, "u-1")]


def test_query_combines_filters(seeded):
    rows, total = seeded.query(
        RecordFilter(start=date(2026, 2, 3), end=date(2026, 2, 5), search="BOB"),
        skip=0,
        limit=10,
    )

    assert total == 2
    assert {r.day.day for r in rows} == {3, 5}


def test_query_status_and_subject(seeded):
    rows, total = seeded.query(RecordFilter(subject_id="u-1", status=AttendanceStatus.LATE), skip=0, limit=10)

    assert total == 1
    assert rows[0].day == date(2026, 2, 3)


def test_query_total_ignores_slice(seeded):
    rows, total = seeded.query(RecordFilter(), skip=4, limit=2)

    assert total == 5
    assert len(rows) == 1


def test_find_between_is_inclusive(seeded):
    rows = seeded.find_between(date(2026, 2, 3), date(2026, 2, 4))

    assert [r.day.day for r in rows] == [4, 3, 3]
