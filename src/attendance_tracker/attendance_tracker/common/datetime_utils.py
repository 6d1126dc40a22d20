from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import StatsPeriod
from ..core.exceptions import ValidationError


def get_timezone(name: Optional[str]) -> ZoneInfo:
    """Resolve the canonical reference timezone (IANA name)."""
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from exc


def now_local(tz: ZoneInfo) -> datetime:
    """Current time in the reference timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)


def to_local(value: datetime, tz: ZoneInfo) -> datetime:
    """Express a timestamp in the reference timezone.

    Naive values are taken to already be wall-clock time in ``tz``.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def to_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Real minutes elapsed, measured in UTC so DST shifts are counted."""
    if start.tzinfo is not None and end.tzinfo is not None:
        start, end = to_utc(start), to_utc(end)
    return int((end - start).total_seconds() // 60)


def month_range(today: date) -> Tuple[date, date]:
    first = today.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first - timedelta(days=1)


def period_range(period: StatsPeriod, today: date) -> Tuple[date, date]:
    """Inclusive (start, end) days of a named period containing ``today``.

    Weeks start on Sunday.
    """
    if period == StatsPeriod.TODAY:
        return today, today
    if period == StatsPeriod.WEEK:
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return start, start + timedelta(days=6)
    if period == StatsPeriod.YEAR:
        return date(today.year, 1, 1), date(today.year, 12, 31)
    return month_range(today)
