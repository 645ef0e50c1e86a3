from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..work_time import late_minutes
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, check_in_at: datetime, expected_check_in: datetime, grace_minutes: int) -> StatusDecision:
        minutes = late_minutes(check_in_at, expected_check_in, grace_minutes)
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=minutes, note=f"Late by {minutes} minutes")

    def decide_checkout(self, *, check_out_at: datetime, expected_check_out: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
