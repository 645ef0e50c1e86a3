from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..work_time import early_leave_minutes
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Check-out before the expected end. The day status is kept; only minutes are reported."""

    def decide_checkin(self, *, check_in_at: datetime, expected_check_in: datetime, grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, check_out_at: datetime, expected_check_out: datetime, current: AttendanceStatus) -> StatusDecision:
        minutes = early_leave_minutes(check_out_at, expected_check_out)
        note = f"Left {minutes} minutes early" if minutes else None
        return StatusDecision(status=current, early_leave_minutes=minutes, note=note)
