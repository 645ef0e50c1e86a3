from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest

from src.attendance_engine.attendance_engine.attendance.work_time import (
    early_leave_minutes,
    format_duration,
    late_minutes,
    work_duration_minutes,
)
from src.attendance_engine.attendance_engine.common.datetime_utils import at_local_time, attendance_date_for
from src.attendance_engine.attendance_engine.core.exceptions import ValidationError

JKT = ZoneInfo("Asia/Jakarta")
DAY = date(2025, 3, 3)
EXPECTED_IN = at_local_time(DAY, time(8, 0), JKT)
EXPECTED_OUT = at_local_time(DAY, time(17, 0), JKT)


def _local(h, m, s=0):
    return datetime(2025, 3, 3, h, m, s, tzinfo=JKT)


def test_within_grace_is_not_late():
    assert late_minutes(_local(8, 14), EXPECTED_IN, 15) == 0


def test_exactly_at_grace_boundary_is_not_late():
    assert late_minutes(_local(8, 15), EXPECTED_IN, 15) == 0


def test_past_grace_counts_minutes_after_the_grace():
    assert late_minutes(_local(8, 16), EXPECTED_IN, 15) == 1
    assert late_minutes(_local(9, 0), EXPECTED_IN, 15) == 45


def test_seconds_within_the_grace_minute_are_not_late():
    assert late_minutes(_local(8, 15, 59), EXPECTED_IN, 15) == 0


def test_late_minutes_is_monotonic():
    previous = 0
    for minute in range(0, 120, 7):
        current = late_minutes(_local(8 + minute // 60, minute % 60), EXPECTED_IN, 15)
        assert current >= previous
        previous = current


def test_late_minutes_accepts_utc_input():
    # 01:30 UTC is 08:30 in Jakarta
    at = datetime(2025, 3, 3, 1, 30, tzinfo=timezone.utc)
    assert late_minutes(at, EXPECTED_IN, 15) == 15


def test_naive_datetimes_are_rejected():
    with pytest.raises(ValidationError):
        late_minutes(datetime(2025, 3, 3, 8, 30), EXPECTED_IN, 15)


def test_negative_grace_is_rejected():
    with pytest.raises(ValidationError):
        late_minutes(_local(8, 30), EXPECTED_IN, -1)


def test_early_leave_minutes():
    assert early_leave_minutes(_local(16, 30), EXPECTED_OUT) == 30
    assert early_leave_minutes(_local(16, 59, 30), EXPECTED_OUT) == 0
    assert early_leave_minutes(_local(17, 0), EXPECTED_OUT) == 0
    assert early_leave_minutes(_local(18, 45), EXPECTED_OUT) == 0


def test_work_duration_is_floored():
    assert work_duration_minutes(_local(8, 0), _local(17, 0, 59)) == 540


def test_work_duration_rejects_checkout_before_checkin():
    with pytest.raises(ValidationError):
        work_duration_minutes(_local(17, 0), _local(8, 0))


def test_format_duration():
    assert format_duration(540) == "9h 0m"
    assert format_duration(75) == "1h 15m"


def test_attendance_date_follows_org_timezone():
    # 23:30 UTC on the 2nd is already the 3rd in Jakarta (UTC+7)
    assert attendance_date_for(datetime(2025, 3, 2, 23, 30, tzinfo=timezone.utc), JKT) == date(2025, 3, 3)
    assert attendance_date_for(datetime(2025, 3, 2, 16, 59, tzinfo=timezone.utc), JKT) == date(2025, 3, 2)
    assert attendance_date_for(datetime(2025, 3, 2, 17, 0, tzinfo=timezone.utc), JKT) == date(2025, 3, 3)
