from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.attendance_tracker.attendance_tracker.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.attendance_tracker.attendance_tracker.attendance.model import RecordFilter
from src.attendance_tracker.attendance_tracker.attendance.service import AttendanceService
from src.attendance_tracker.attendance_tracker.core.enums import AttendanceStatus, EventKind
from src.attendance_tracker.attendance_tracker.core.exceptions import (
    AlreadyCheckedOutError,
    DuplicateCheckInError,
    NotCheckedInError,
    StorageError,
    ValidationError,
)
from src.attendance_tracker.attendance_tracker.users.model import Identity


def test_checkin_creates_open_present_record(service, attendance_repo, employee, at):
    record = service.check_in(employee, now=at(8, 55), remarks="  early bird  ")

    assert record.record_id
    assert record.day == at(8, 55).date()
    assert record.status == AttendanceStatus.PRESENT
    assert record.elapsed_hours == 0
    assert record.check_out is None
    assert record.check_in.location == "Office"
    assert record.remarks == "early bird"
    assert record.display_name == "Alice Nguyen"
    assert attendance_repo.get_for_subject_and_day("u-1", record.day) == record


def test_checkin_twice_same_day_keeps_one_record(service, attendance_repo, employee, at):
    first = service.check_in(employee, now=at(9, 0))

    with pytest.raises(DuplicateCheckInError) as exc:
        service.check_in(employee, now=at(10, 0), location="Home")

    assert exc.value.record == first
    assert len(attendance_repo) == 1


def test_checkin_next_day_is_a_new_bucket(service, attendance_repo, employee, at):
    service.check_in(employee, now=at(9, 0, day=2))
    service.check_in(employee, now=at(9, 0, day=3))

    assert len(attendance_repo) == 2


def test_checkout_without_checkin_creates_nothing(service, attendance_repo, employee, at):
    with pytest.raises(NotCheckedInError):
        service.check_out(employee, now=at(17, 0))

    assert len(attendance_repo) == 0


def test_full_day_on_time_is_present(service, employee, at):
    service.check_in(employee, now=at(9, 0))
    record = service.check_out(employee, now=at(17, 30))

    assert record.elapsed_hours == 8.5
    assert record.status == AttendanceStatus.PRESENT
    assert record.check_out.timestamp == at(17, 30)


def test_late_checkin_with_full_day_is_late(service, employee, at):
    service.check_in(employee, now=at(9, 45))
    record = service.check_out(employee, now=at(18, 0))

    assert record.elapsed_hours == 8.25
    assert record.status == AttendanceStatus.LATE


def test_short_day_is_half_day_even_when_on_time(service, employee, at):
    service.check_in(employee, now=at(9, 0))
    record = service.check_out(employee, now=at(12, 30))

    assert record.elapsed_hours == 3.5
    assert record.status == AttendanceStatus.HALF_DAY


def test_second_checkout_returns_existing_record_unchanged(service, employee, at):
    service.check_in(employee, now=at(9, 0))
    done = service.check_out(employee, now=at(17, 0))

    with pytest.raises(AlreadyCheckedOutError) as exc:
        service.check_out(employee, now=at(18, 0))

    assert exc.value.record == done
    assert exc.value.record.elapsed_hours == 8.0


def test_checkout_keeps_remarks_unless_new_ones_given(service, employee, at):
    service.check_in(employee, now=at(9, 0), remarks="client visit")
    kept = service.check_out(employee, now=at(17, 0), remarks="   ")
    assert kept.remarks == "client visit"


def test_checkout_overwrites_remarks(service, employee, at):
    service.check_in(employee, now=at(9, 0), remarks="client visit")
    record = service.check_out(employee, now=at(17, 0), remarks="left for airport", location="Airport")

    assert record.remarks == "left for airport"
    assert record.check_out.location == "Airport"


def test_remarks_longer_than_limit_rejected_before_storage(service, attendance_repo, employee, at):
    with pytest.raises(ValidationError):
        service.check_in(employee, now=at(9, 0), remarks="x" * 201)

    assert len(attendance_repo) == 0


def test_missing_subject_rejected(service, attendance_repo, at):
    with pytest.raises(ValidationError):
        service.check_in(Identity(subject_id=" ", display_name="Nobody"), now=at(9, 0))

    assert len(attendance_repo) == 0


def test_checkout_not_after_checkin_is_rejected(service, employee, at):
    service.check_in(employee, now=at(9, 0))

    with pytest.raises(ValidationError):
        service.check_out(employee, now=at(9, 0))


def test_day_bucket_and_late_rule_follow_reference_timezone(attendance_repo, employee, at):
    # 02:45 UTC is 09:45 in Ho Chi Minh City.
    svc = AttendanceService(attendance_repo, tz=ZoneInfo("Asia/Ho_Chi_Minh"))
    svc.check_in(employee, now=at(2, 45))
    record = svc.check_out(employee, now=at(11, 0))

    assert record.day == at(2, 45).date()
    assert record.status == AttendanceStatus.LATE
    assert record.elapsed_hours == 8.25


def test_today_status_progression(service, employee, at):
    before = service.get_today_status("u-1", now=at(8, 0))
    assert (before.checked_in, before.checked_out, before.record) == (False, False, None)

    service.check_in(employee, now=at(9, 0))
    during = service.get_today_status("u-1", now=at(12, 0))
    assert (during.checked_in, during.checked_out) == (True, False)

    service.check_out(employee, now=at(17, 0))
    after = service.get_today_status("u-1", now=at(18, 0))
    assert (after.checked_in, after.checked_out) == (True, True)
    assert after.record.status == AttendanceStatus.PRESENT


def test_checkin_and_checkout_publish_to_admins(service, notifier, transport, employee, at):
    notifier.join_admin_group("sid-admin")

    service.check_in(employee, now=at(9, 0))
    service.check_out(employee, now=at(17, 0))

    kinds = [payload["kind"] for _, _, payload in transport.sent]
    assert kinds == [EventKind.CHECKIN.value, EventKind.CHECKOUT.value]
    _, event, payload = transport.sent[-1]
    assert event == "attendance_update"
    assert payload["record"]["status"] == "present"
    assert payload["record"]["elapsed_hours"] == 8.0
    assert payload["subject"] == {"display_name": "Alice Nguyen", "subject_id": "u-1", "department": "IT"}


def test_failed_checkin_publishes_nothing(service, notifier, transport, employee, at):
    notifier.join_admin_group("sid-admin")
    service.check_in(employee, now=at(9, 0))

    with pytest.raises(DuplicateCheckInError):
        service.check_in(employee, now=at(9, 5))

    assert len(transport.sent) == 1


def test_list_records_pagination_reports_last_page(service, at):
    for i in range(25):
        service.check_in(Identity(subject_id=f"u-{i}", display_name=f"Staff {i}"), now=at(9, 0))

    page = service.list_records(RecordFilter(), page=3, page_size=10)

    assert len(page.items) == 5
    assert page.total == 25
    assert page.total_pages == 3
    assert page.has_next_page is False
    assert page.has_prev_page is True


def test_list_records_rejects_bad_paging(service):
    with pytest.raises(ValidationError):
        service.list_records(RecordFilter(), page=0, page_size=10)
    with pytest.raises(ValidationError):
        service.list_records(RecordFilter(), page=1, page_size="ten")


def test_list_own_records_summary_covers_all_pages(service, employee, at):
    for day, (start, end) in enumerate([(9, 17), (10, 18), (9, 12)], start=2):
        service.check_in(employee, now=at(start, 0, day=day))
        service.check_out(employee, now=at(end, 0, day=day))

    page, summary = service.list_own_records("u-1", page=1, page_size=2)

    assert [r.day.day for r in page.items] == [4, 3]
    assert summary.total_days == 3
    assert summary.present_days == 1
    assert summary.late_days == 1
    assert summary.half_days == 1
    assert summary.total_hours == 19.0


class _UnreachableStore(InMemoryAttendanceRepository):
    def get_for_subject_and_day(self, subject_id, day):
        raise StorageError("connection refused")


def test_storage_errors_surface_to_caller(employee, at):
    svc = AttendanceService(_UnreachableStore(), tz=ZoneInfo("UTC"))

    with pytest.raises(StorageError):
        svc.check_in(employee, now=at(9, 0))


NEW_YORK = ZoneInfo("America/New_York")


def _utc(month, day, hour, minute=0):
    return datetime(2026, month, day, hour, minute, tzinfo=timezone.utc)


def test_shift_across_fall_back_counts_real_hours(attendance_repo, employee):
    # 00:30 EDT -> 04:00 EST is 4.5 hours, not the 3.5 the wall clock shows.
    svc = AttendanceService(attendance_repo, tz=NEW_YORK)
    svc.check_in(employee, now=_utc(11, 1, 4, 30))
    record = svc.check_out(employee, now=_utc(11, 1, 9, 0))

    assert record.day == date(2026, 11, 1)
    assert record.elapsed_hours == 4.5
    assert record.status == AttendanceStatus.PRESENT


def test_checkout_in_repeated_hour_is_after_checkin(attendance_repo, employee):
    # 01:30 EDT then 01:10 EST: earlier on the wall clock, 40 minutes later in fact.
    svc = AttendanceService(attendance_repo, tz=NEW_YORK)
    svc.check_in(employee, now=_utc(11, 1, 5, 30))
    record = svc.check_out(employee, now=_utc(11, 1, 6, 10))

    assert record.elapsed_hours == 0.67
    assert record.status == AttendanceStatus.HALF_DAY


def test_shift_across_spring_forward_counts_real_hours(attendance_repo, employee):
    # 01:00 EST -> 05:30 EDT is 3.5 hours, under the half-day threshold.
    svc = AttendanceService(attendance_repo, tz=NEW_YORK)
    svc.check_in(employee, now=_utc(3, 8, 6, 0))
    record = svc.check_out(employee, now=_utc(3, 8, 9, 30))

    assert record.day == date(2026, 3, 8)
    assert record.elapsed_hours == 3.5
    assert record.status == AttendanceStatus.HALF_DAY
