from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def load_timezone(name: str) -> ZoneInfo:
    """Resolve the organization's IANA zone name (e.g. ``Asia/Jakarta``)."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name!r}")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time of day."""
    v = (value or "").strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def to_local(instant: datetime, tz: ZoneInfo) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValidationError("Timestamp must carry a UTC offset")
    return instant.astimezone(tz)


def attendance_date_for(instant: datetime, tz: ZoneInfo) -> date:
    """Civil day in ``tz`` that an event at ``instant`` is attributed to."""
    return to_local(instant, tz).date()


def at_local_time(day: date, time_of_day: time, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time_of_day, tzinfo=tz)


def whole_minutes(delta: timedelta) -> int:
    """Floor of a non-negative duration in minutes."""
    if delta < timedelta(0):
        raise ValueError("whole_minutes expects a non-negative duration")
    return delta // timedelta(minutes=1)
