from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from ..common.datetime_utils import now_local, to_local, to_utc
from ..common.locks import KeyedLock
from ..common.validators import clean_location, clean_optional_text, clean_remarks, require_non_empty, require_positive_int
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from ..core.enums import EventKind
from ..core.exceptions import (
    AlreadyCheckedOutError,
    DuplicateCheckInError,
    DuplicateRecordError,
    NotCheckedInError,
    ValidationError,
)
from ..realtime.notifier import RealtimeNotifier
from ..stats.summary import RecordSummary, summarize_records
from ..users.model import Identity
from .factory import AttendanceStrategyFactory, compute_elapsed_hours
from .model import AttendanceRecord, Page, PunchDetails, RecordFilter, TodayStatus
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def format_record(record: AttendanceRecord, tz: ZoneInfo) -> dict:
    """Flat, JSON-ready view of a record (times as HH:MM:SS in ``tz``)."""

    check_out = record.check_out
    return {
        "id": record.record_id,
        "subject_id": record.subject_id,
        "employee_code": record.employee_code,
        "display_name": record.display_name,
        "date": record.day.strftime("%Y-%m-%d"),
        "check_in": to_local(record.check_in.timestamp, tz).strftime("%H:%M:%S"),
        "check_in_location": record.check_in.location,
        "check_out": to_local(check_out.timestamp, tz).strftime("%H:%M:%S") if check_out else None,
        "check_out_location": check_out.location if check_out else None,
        "elapsed_hours": record.elapsed_hours,
        "status": record.status.value,
        "remarks": record.remarks,
    }


class AttendanceService:
    """Check-in/check-out engine.

    Calls for the same (subject, day) are serialized through a keyed lock;
    the store's uniqueness check backs it up across processes. Events are
    published only after the store accepted the change.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        tz: ZoneInfo,
        notifier: Optional[RealtimeNotifier] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self._attendance = attendance
        self._tz = tz
        self._notifier = notifier
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._locks = locks or KeyedLock()

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_local(now or now_local(self._tz), self._tz)

    def today(self, *, now: Optional[datetime] = None) -> date:
        return self._now(now).date()

    def check_in(
        self,
        identity: Identity,
        *,
        location: Optional[str] = None,
        origin_address: Optional[str] = None,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        subject_id = require_non_empty(identity.subject_id, "Subject id")
        display_name = require_non_empty(identity.display_name, "Display name")
        location = clean_location(location)
        origin_address = clean_optional_text(origin_address)
        remarks = clean_remarks(remarks)

        now = self._now(now)
        day = now.date()

        with self._locks.hold((subject_id, day)):
            existing = self._attendance.get_for_subject_and_day(subject_id, day)
            if existing:
                raise DuplicateCheckInError(record=existing)

            decision = self._factory.for_checkin().decide_checkin(check_in=now)
            draft = AttendanceRecord(
                record_id="",
                subject_id=subject_id,
                display_name=display_name,
                employee_code=identity.employee_code,
                day=day,
                check_in=PunchDetails(timestamp=now, location=location, origin_address=origin_address),
                check_out=None,
                elapsed_hours=0.0,
                status=decision.status,
                remarks=remarks,
                created_at=now,
                updated_at=now,
            )
            try:
                record = self._attendance.insert(draft)
            except DuplicateRecordError:
                # Another process won the race for this day.
                raise DuplicateCheckInError(record=self._attendance.get_for_subject_and_day(subject_id, day)) from None

        logger.info("check-in: subject=%s day=%s record=%s", subject_id, day, record.record_id)
        self._publish(EventKind.CHECKIN, record, identity)
        return record

    def check_out(
        self,
        identity: Identity,
        *,
        location: Optional[str] = None,
        origin_address: Optional[str] = None,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        subject_id = require_non_empty(identity.subject_id, "Subject id")
        location = clean_location(location)
        origin_address = clean_optional_text(origin_address)
        remarks = clean_remarks(remarks)

        now = self._now(now)
        day = now.date()

        with self._locks.hold((subject_id, day)):
            record = self._attendance.get_for_subject_and_day(subject_id, day)
            if not record:
                raise NotCheckedInError()
            if not record.is_open:
                raise AlreadyCheckedOutError(record=record)

            check_in_at = to_local(record.check_in.timestamp, self._tz)
            if to_utc(now) <= to_utc(check_in_at):
                raise ValidationError("Check-out time must be after check-in time")

            hours = compute_elapsed_hours(check_in_at, now)
            strategy = self._factory.for_checkout(check_in=check_in_at, elapsed_hours=hours)
            decision = strategy.decide_checkout(check_in=check_in_at, check_out=now, elapsed_hours=hours)

            updated = self._attendance.update(
                replace(
                    record,
                    check_out=PunchDetails(timestamp=now, location=location, origin_address=origin_address),
                    elapsed_hours=hours,
                    status=decision.status,
                    remarks=remarks or record.remarks,
                    updated_at=now,
                )
            )

        logger.info(
            "check-out: subject=%s day=%s hours=%.2f status=%s",
            subject_id,
            day,
            updated.elapsed_hours,
            updated.status.value,
        )
        self._publish(EventKind.CHECKOUT, updated, identity)
        return updated

    def get_today_status(self, subject_id: str, *, now: Optional[datetime] = None) -> TodayStatus:
        record = self._attendance.get_for_subject_and_day(subject_id, self.today(now=now))
        if not record:
            return TodayStatus(checked_in=False, checked_out=False, record=None)
        return TodayStatus(checked_in=True, checked_out=not record.is_open, record=record)

    def list_records(
        self,
        record_filter: RecordFilter,
        *,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[AttendanceRecord]:
        page = require_positive_int(page, "Page")
        page_size = require_positive_int(page_size, "Page size")
        if record_filter.start and record_filter.end and record_filter.start > record_filter.end:
            raise ValidationError("Start date must not be after end date")

        items, total = self._attendance.query(record_filter, skip=(page - 1) * page_size, limit=page_size)
        return Page(items=list(items), total=total, page=page, page_size=page_size)

    def list_own_records(
        self,
        subject_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Tuple[Page[AttendanceRecord], RecordSummary]:
        """Caller-scoped listing; the summary covers every match, not just the page."""

        record_filter = RecordFilter(subject_id=require_non_empty(subject_id, "Subject id"), start=start, end=end)
        result = self.list_records(record_filter, page=page, page_size=page_size)

        if result.total <= len(result.items):
            summary = summarize_records(result.items)
        else:
            everything, _ = self._attendance.query(record_filter, skip=0, limit=result.total)
            summary = summarize_records(everything)
        return result, summary

    def format(self, record: AttendanceRecord) -> dict:
        return format_record(record, self._tz)

    def _publish(self, kind: EventKind, record: AttendanceRecord, identity: Identity) -> None:
        if self._notifier is None:
            return
        self._notifier.publish(kind, format_record(record, self._tz), identity.summary())
