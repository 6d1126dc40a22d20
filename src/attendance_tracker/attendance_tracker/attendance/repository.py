from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, Tuple

from .model import AttendanceRecord, RecordFilter


class AttendanceRepository(Protocol):
    """Record store used by the attendance engine.

    Implementations must reject a second record for the same
    (subject_id, day) with ``DuplicateRecordError`` and wrap backend failures
    in ``StorageError``.
    """

    def get_for_subject_and_day(self, subject_id: str, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Store a new record and return it with its assigned ``record_id``."""

        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def query(self, record_filter: RecordFilter, *, skip: int, limit: int) -> Tuple[Sequence[AttendanceRecord], int]:
        """Matching records sorted newest day first, sliced, plus the unsliced count."""

        raise NotImplementedError

    def find_between(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
