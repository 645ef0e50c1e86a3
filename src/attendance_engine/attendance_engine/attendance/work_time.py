from __future__ import annotations

from datetime import datetime, timedelta

from ..common.datetime_utils import whole_minutes
from ..core.exceptions import ValidationError


def _require_aware(value: datetime, name: str) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{name} must carry a UTC offset")


def clock_minute(value: datetime) -> datetime:
    """Drop seconds: lateness is judged on the wall-clock minute of the check-in."""
    return value.replace(second=0, microsecond=0)


def check_in_deadline(expected_check_in: datetime, grace_minutes: int) -> datetime:
    _require_aware(expected_check_in, "expected_check_in")
    if grace_minutes < 0:
        raise ValidationError("Grace period cannot be negative")
    return expected_check_in + timedelta(minutes=grace_minutes)


def late_minutes(check_in_at: datetime, expected_check_in: datetime, grace_minutes: int) -> int:
    """Whole minutes past ``expected_check_in + grace``; 0 exactly when the check-in minute is within grace."""
    _require_aware(check_in_at, "check_in_at")
    deadline = check_in_deadline(expected_check_in, grace_minutes)
    arrived = clock_minute(check_in_at)
    if arrived <= deadline:
        return 0
    return whole_minutes(arrived - deadline)


def early_leave_minutes(check_out_at: datetime, expected_check_out: datetime) -> int:
    _require_aware(check_out_at, "check_out_at")
    _require_aware(expected_check_out, "expected_check_out")
    if check_out_at >= expected_check_out:
        return 0
    return whole_minutes(expected_check_out - check_out_at)


def work_duration_minutes(check_in_at: datetime, check_out_at: datetime) -> int:
    _require_aware(check_in_at, "check_in_at")
    _require_aware(check_out_at, "check_out_at")
    if check_out_at < check_in_at:
        raise ValidationError("Check-out time cannot be earlier than check-in time")
    return whole_minutes(check_out_at - check_in_at)


def format_duration(minutes: int) -> str:
    return f"{minutes // 60}h {minutes % 60}m"
