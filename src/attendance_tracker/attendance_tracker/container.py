from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from .attendance.factory import AttendanceStrategyFactory
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import get_timezone
from .core.constants import DEFAULT_TIMEZONE
from .core.enums import StoreBackend
from .database.connection import DBConfig, DatabaseConnection
from .realtime.notifier import RealtimeNotifier
from .stats.service import StatsService
from .users.mysql_employee_directory import MySQLEmployeeDirectory
from .users.repository import EmployeeDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    tz: ZoneInfo
    store_backend: StoreBackend
    conn: Optional[DatabaseConnection]

    attendance_repo: AttendanceRepository
    employee_directory: Optional[EmployeeDirectory]
    notifier: RealtimeNotifier

    attendance_service: AttendanceService
    stats_service: StatsService

    @property
    def degraded(self) -> bool:
        return self.store_backend == StoreBackend.MEMORY


def build_container(
    *,
    db_config: Optional[dict] = None,
    store_backend: str | StoreBackend = StoreBackend.MYSQL,
    timezone: str = DEFAULT_TIMEZONE,
    notifier: Optional[RealtimeNotifier] = None,
) -> Container:
    """Wire repositories and services for the configured store.

    ``memory`` runs in degraded mode: records live only as long as the process.
    """
    tz = get_timezone(timezone)
    backend = StoreBackend(store_backend)
    notifier = notifier or RealtimeNotifier()

    conn: Optional[DatabaseConnection] = None
    directory: Optional[EmployeeDirectory] = None
    if backend == StoreBackend.MYSQL:
        if not db_config:
            raise ValueError("DB_CONFIG is required when STORE_BACKEND=mysql")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        attendance_repo: AttendanceRepository = MySQLAttendanceRepository(conn, tz=tz)
        directory = MySQLEmployeeDirectory(conn)
    else:
        logger.warning("STORE_BACKEND=memory: attendance records are not persisted")
        attendance_repo = InMemoryAttendanceRepository()

    attendance_service = AttendanceService(
        attendance_repo,
        tz=tz,
        notifier=notifier,
        strategy_factory=AttendanceStrategyFactory(),
    )
    stats_service = StatsService(attendance_repo, tz=tz, directory=directory)

    return Container(
        tz=tz,
        store_backend=backend,
        conn=conn,
        attendance_repo=attendance_repo,
        employee_directory=directory,
        notifier=notifier,
        attendance_service=attendance_service,
        stats_service=stats_service,
    )
