from datetime import datetime
from zoneinfo import ZoneInfo

from src.attendance_engine.attendance_engine.attendance.factory import AttendanceStrategyFactory
from src.attendance_engine.attendance_engine.attendance.strategies.early_strategy import EarlyLeaveStrategy
from src.attendance_engine.attendance_engine.attendance.strategies.late_strategy import LateStrategy
from src.attendance_engine.attendance_engine.attendance.strategies.normal_strategy import NormalStrategy
from src.attendance_engine.attendance_engine.core.enums import AttendanceStatus

JKT = ZoneInfo("Asia/Jakarta")
EXPECTED_IN = datetime(2025, 1, 1, 8, 0, tzinfo=JKT)
EXPECTED_OUT = datetime(2025, 1, 1, 17, 0, tzinfo=JKT)


def test_factory_checkin_on_time_within_grace():
    now = datetime(2025, 1, 1, 8, 4, 59, tzinfo=JKT)

    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(check_in_at=now, expected_check_in=EXPECTED_IN, grace_minutes=5)

    assert isinstance(strategy, NormalStrategy)
    decision = strategy.decide_checkin(check_in_at=now, expected_check_in=EXPECTED_IN, grace_minutes=5)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.late_minutes == 0


def test_factory_checkin_late_after_grace():
    now = datetime(2025, 1, 1, 8, 6, 0, tzinfo=JKT)

    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(check_in_at=now, expected_check_in=EXPECTED_IN, grace_minutes=5)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(check_in_at=now, expected_check_in=EXPECTED_IN, grace_minutes=5)
    assert decision.status == AttendanceStatus.LATE
    assert decision.late_minutes == 1
    assert decision.note == "Late by 1 minutes"


def test_factory_checkout_early_keeps_status():
    now = datetime(2025, 1, 1, 16, 20, tzinfo=JKT)

    strategy = AttendanceStrategyFactory().for_checkout(check_out_at=now, expected_check_out=EXPECTED_OUT)

    assert isinstance(strategy, EarlyLeaveStrategy)
    decision = strategy.decide_checkout(check_out_at=now, expected_check_out=EXPECTED_OUT, current=AttendanceStatus.LATE)
    assert decision.status == AttendanceStatus.LATE
    assert decision.early_leave_minutes == 40


def test_factory_checkout_on_time():
    now = datetime(2025, 1, 1, 17, 0, tzinfo=JKT)

    strategy = AttendanceStrategyFactory().for_checkout(check_out_at=now, expected_check_out=EXPECTED_OUT)

    assert isinstance(strategy, NormalStrategy)
    decision = strategy.decide_checkout(check_out_at=now, expected_check_out=EXPECTED_OUT, current=AttendanceStatus.PRESENT)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.early_leave_minutes == 0


def test_early_leave_strategy_is_neutral_on_check_in():
    now = datetime(2025, 1, 1, 8, 30, tzinfo=JKT)

    decision = EarlyLeaveStrategy().decide_checkin(check_in_at=now, expected_check_in=EXPECTED_IN, grace_minutes=5)

    assert decision.status == AttendanceStatus.PRESENT
    assert decision.late_minutes == 0
    assert decision.note is None
