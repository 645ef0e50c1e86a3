from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """Check-in within the grace period; check-out at or after the expected end."""

    def decide_checkin(self, *, check_in_at: datetime, expected_check_in: datetime, grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, check_out_at: datetime, expected_check_out: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
