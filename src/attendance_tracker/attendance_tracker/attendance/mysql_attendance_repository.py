from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from ..common.datetime_utils import to_local, to_utc
from ..core.constants import DEFAULT_LOCATION
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, escape_like, fetchall, fetchone
from .model import AttendanceRecord, PunchDetails, RecordFilter
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, subject_id, display_name, employee_code, work_date,
    check_in_time, check_in_location, check_in_address,
    check_out_time, check_out_location, check_out_address,
    elapsed_hours, status, remarks, created_at, updated_at
"""


class MySQLAttendanceRepository(AttendanceRepository):
    """Durable store.

    DATETIME columns hold naive UTC; rows are read back in ``tz``. ``work_date``
    is the day bucket the engine computed in ``tz``.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, tz: ZoneInfo):
        self._conn_factory = conn_factory
        self._tz = tz

    def _to_db(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return to_utc(to_local(value, self._tz)).replace(tzinfo=None)

    def _from_db(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc).astimezone(self._tz)

    def _to_record(self, r: dict) -> AttendanceRecord:
        check_out = None
        if r.get("check_out_time") is not None:
            check_out = PunchDetails(
                timestamp=self._from_db(r["check_out_time"]),
                location=r.get("check_out_location") or DEFAULT_LOCATION,
                origin_address=r.get("check_out_address"),
            )
        return AttendanceRecord(
            record_id=str(r["attendance_id"]),
            subject_id=str(r["subject_id"]),
            display_name=r["display_name"],
            employee_code=r.get("employee_code"),
            day=r["work_date"],
            check_in=PunchDetails(
                timestamp=self._from_db(r["check_in_time"]),
                location=r.get("check_in_location") or DEFAULT_LOCATION,
                origin_address=r.get("check_in_address"),
            ),
            check_out=check_out,
            elapsed_hours=float(r.get("elapsed_hours") or 0),
            status=AttendanceStatus(r["status"]),
            remarks=r.get("remarks"),
            created_at=self._from_db(r.get("created_at")),
            updated_at=self._from_db(r.get("updated_at")),
        )

    def get_for_subject_and_day(self, subject_id: str, day: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE subject_id=%s AND work_date=%s
                """,
                (subject_id, day),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    subject_id, display_name, employee_code, work_date,
                    check_in_time, check_in_location, check_in_address,
                    elapsed_hours, status, remarks, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.subject_id,
                    record.display_name,
                    record.employee_code,
                    record.day,
                    self._to_db(record.check_in.timestamp),
                    record.check_in.location,
                    record.check_in.origin_address,
                    record.elapsed_hours,
                    record.status.value,
                    record.remarks,
                    self._to_db(record.created_at),
                    self._to_db(record.updated_at),
                ),
            )
            new_id = str(cur.lastrowid)

        return replace(record, record_id=new_id)

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        check_out = record.check_out
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_location=%s, check_out_address=%s,
                    elapsed_hours=%s, status=%s, remarks=%s, updated_at=%s
                WHERE attendance_id=%s
                """,
                (
                    self._to_db(check_out.timestamp) if check_out else None,
                    check_out.location if check_out else None,
                    check_out.origin_address if check_out else None,
                    record.elapsed_hours,
                    record.status.value,
                    record.remarks,
                    self._to_db(record.updated_at),
                    int(record.record_id),
                ),
            )
        return record

    def _where(self, record_filter: RecordFilter) -> Tuple[str, list]:
        clauses = ["1=1"]
        params: list[object] = []

        if record_filter.subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(record_filter.subject_id)
        if record_filter.start is not None:
            clauses.append("work_date >= %s")
            params.append(record_filter.start)
        if record_filter.end is not None:
            clauses.append("work_date <= %s")
            params.append(record_filter.end)
        if record_filter.status is not None:
            clauses.append("status=%s")
            params.append(record_filter.status.value)
        if record_filter.search:
            clauses.append("LOWER(display_name) LIKE %s")
            params.append(f"%{escape_like(record_filter.search.lower())}%")

        return " AND ".join(clauses), params

    def query(self, record_filter: RecordFilter, *, skip: int, limit: int) -> Tuple[Sequence[AttendanceRecord], int]:
        where, params = self._where(record_filter)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, check_in_time DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(skip)),
            )
            rows = fetchall(cur)

        return [self._to_record(r) for r in rows], total

    def find_between(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date DESC, check_in_time DESC
                """,
                (start, end),
            )
            rows = fetchall(cur)
        return [self._to_record(r) for r in rows]
