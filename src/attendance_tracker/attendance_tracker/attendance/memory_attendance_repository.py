from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence, Tuple

from ..common.datetime_utils import to_utc
from ..core.exceptions import DuplicateRecordError, StorageError
from .model import AttendanceRecord, RecordFilter
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _newest_first(records) -> list[AttendanceRecord]:
    return sorted(records, key=lambda r: (r.day, to_utc(r.check_in.timestamp)), reverse=True)


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-lifetime store for degraded mode (no durability).

    Each instance owns its data; nothing is shared through module globals.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_subject_day: dict[tuple[str, date], AttendanceRecord] = {}

    def get_for_subject_and_day(self, subject_id: str, day: date) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._by_subject_day.get((subject_id, day))

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        key = (record.subject_id, record.day)
        with self._lock:
            if key in self._by_subject_day:
                raise DuplicateRecordError(f"Record already exists for {record.subject_id} on {record.day}")
            stored = replace(record, record_id=record.record_id or uuid.uuid4().hex)
            self._by_subject_day[key] = stored
        logger.debug("memory store: inserted %s", stored.record_id)
        return stored

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        key = (record.subject_id, record.day)
        with self._lock:
            current = self._by_subject_day.get(key)
            if current is None or current.record_id != record.record_id:
                raise StorageError(f"Record {record.record_id} not found")
            self._by_subject_day[key] = record
        return record

    def query(self, record_filter: RecordFilter, *, skip: int, limit: int) -> Tuple[Sequence[AttendanceRecord], int]:
        with self._lock:
            snapshot = list(self._by_subject_day.values())
        matched = _newest_first(r for r in snapshot if record_filter.matches(r))
        return matched[skip : skip + limit], len(matched)

    def find_between(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        with self._lock:
            snapshot = list(self._by_subject_day.values())
        return _newest_first(r for r in snapshot if start <= r.day <= end)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_subject_day)
