from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .work_time import check_in_deadline, clock_minute


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, check_in_at: datetime, expected_check_in: datetime, grace_minutes: int) -> AttendanceStrategy:
        if clock_minute(check_in_at) <= check_in_deadline(expected_check_in, grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self, *, check_out_at: datetime, expected_check_out: datetime) -> AttendanceStrategy:
        if check_out_at < expected_check_out:
            return EarlyLeaveStrategy()
        return NormalStrategy()
