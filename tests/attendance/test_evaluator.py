from dataclasses import replace
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest

from src.attendance_engine.attendance_engine.attendance.evaluator import AttendanceEvaluator
from src.attendance_engine.attendance_engine.attendance.model import AttendanceRecord, CheckEvent
from src.attendance_engine.attendance_engine.common.validators import Coordinates
from src.attendance_engine.attendance_engine.core.enums import AttendanceStatus, Role
from src.attendance_engine.attendance_engine.core.exceptions import (
    DuplicateCheckIn,
    DuplicateCheckOut,
    EmployeeInactive,
    FaceNotEnrolled,
    FaceVerificationFailed,
    NoCheckInFound,
    ValidationError,
)
from src.attendance_engine.attendance_engine.employees.model import Employee
from src.attendance_engine.attendance_engine.settings.model import OfficeSettings

JKT = ZoneInfo("Asia/Jakarta")
OFFICE = Coordinates(latitude=-6.2088, longitude=106.8456)
FAR_AWAY = Coordinates(latitude=-6.3088, longitude=106.8456)

SETTINGS = OfficeSettings(
    settings_id=1,
    version=3,
    office_name="Head Office",
    latitude=OFFICE.latitude,
    longitude=OFFICE.longitude,
    radius_meters=100,
    default_check_in=time(8, 0),
    default_check_out=time(17, 0),
    late_tolerance_minutes=15,
    face_similarity_threshold=0.8,
)

EMPLOYEE = Employee(employee_id=7, name="Dewi", email="dewi@example.com", role=Role.EMPLOYEE, face_token="tok-7")


def _at(h, m):
    return datetime(2025, 3, 3, h, m, tzinfo=JKT).astimezone(timezone.utc)


def _checked_in(h=8, m=0, status=AttendanceStatus.PRESENT, checked_out=False):
    event = CheckEvent(at=_at(h, m), latitude=OFFICE.latitude, longitude=OFFICE.longitude,
                       photo_url=None, face_verified=True, location_verified=True)
    return AttendanceRecord(
        attendance_id=1,
        employee_id=EMPLOYEE.employee_id,
        attendance_date=date(2025, 3, 3),
        status=status,
        check_in=event,
        check_out=event if checked_out else None,
    )


@pytest.fixture
def evaluator():
    return AttendanceEvaluator(JKT)


def test_check_in_on_time(evaluator):
    decision = evaluator.check_in(
        employee=EMPLOYEE, settings=SETTINGS, existing=None, at=_at(8, 14), position=OFFICE, similarity=0.9
    )

    assert decision.status == AttendanceStatus.PRESENT
    assert decision.late_minutes == 0
    assert decision.attendance_date == date(2025, 3, 3)
    assert decision.geofence.verified is True
    assert decision.face.verified is True
    assert decision.settings_version == 3


def test_check_in_late(evaluator):
    decision = evaluator.check_in(
        employee=EMPLOYEE, settings=SETTINGS, existing=None, at=_at(8, 16), position=OFFICE, similarity=0.9
    )

    assert decision.status == AttendanceStatus.LATE
    assert decision.late_minutes == 1


def test_check_in_outside_geofence_still_succeeds(evaluator):
    decision = evaluator.check_in(
        employee=EMPLOYEE, settings=SETTINGS, existing=None, at=_at(8, 0), position=FAR_AWAY, similarity=0.9
    )

    assert decision.geofence.verified is False
    assert decision.status == AttendanceStatus.PRESENT


def test_check_in_rejects_low_similarity(evaluator):
    with pytest.raises(FaceVerificationFailed):
        evaluator.check_in(
            employee=EMPLOYEE, settings=SETTINGS, existing=None, at=_at(8, 0), position=OFFICE, similarity=0.79
        )


def test_check_in_twice_is_duplicate(evaluator):
    with pytest.raises(DuplicateCheckIn):
        evaluator.check_in(
            employee=EMPLOYEE, settings=SETTINGS, existing=_checked_in(), at=_at(9, 0), position=OFFICE, similarity=0.9
        )


def test_inactive_employee_is_rejected(evaluator):
    inactive = Employee(employee_id=8, name="Budi", email="b@example.com", role=Role.EMPLOYEE, is_active=False, face_token="t")
    with pytest.raises(EmployeeInactive):
        evaluator.check_in(
            employee=inactive, settings=SETTINGS, existing=None, at=_at(8, 0), position=OFFICE, similarity=0.9
        )


def test_employee_without_face_is_rejected(evaluator):
    unenrolled = Employee(employee_id=9, name="Sari", email="s@example.com", role=Role.EMPLOYEE)
    with pytest.raises(FaceNotEnrolled):
        evaluator.check_in(
            employee=unenrolled, settings=SETTINGS, existing=None, at=_at(8, 0), position=OFFICE, similarity=0.9
        )


def test_check_out_without_check_in(evaluator):
    with pytest.raises(NoCheckInFound):
        evaluator.check_out(
            employee=EMPLOYEE, settings=SETTINGS, existing=None, at=_at(17, 0), position=OFFICE, similarity=0.9
        )


def test_check_out_twice_is_duplicate(evaluator):
    with pytest.raises(DuplicateCheckOut):
        evaluator.check_out(
            employee=EMPLOYEE,
            settings=SETTINGS,
            existing=_checked_in(checked_out=True),
            at=_at(17, 0),
            position=OFFICE,
            similarity=0.9,
        )


def test_early_check_out_keeps_late_status(evaluator):
    decision = evaluator.check_out(
        employee=EMPLOYEE,
        settings=SETTINGS,
        existing=_checked_in(8, 30, status=AttendanceStatus.LATE),
        at=_at(16, 30),
        position=OFFICE,
        similarity=0.85,
    )

    assert decision.status == AttendanceStatus.LATE
    assert decision.early_leave_minutes == 30
    assert decision.work_duration_minutes == 480


def test_check_out_after_hours(evaluator):
    decision = evaluator.check_out(
        employee=EMPLOYEE,
        settings=SETTINGS,
        existing=_checked_in(8, 0),
        at=_at(17, 45),
        position=OFFICE,
        similarity=0.85,
    )

    assert decision.status == AttendanceStatus.PRESENT
    assert decision.early_leave_minutes == 0
    assert decision.work_duration_minutes == 585


def test_record_from_another_day_is_rejected(evaluator):
    yesterday = replace(_checked_in(), attendance_date=date(2025, 3, 2))
    pending = replace(yesterday, check_in=None)

    with pytest.raises(ValidationError):
        evaluator.check_in(
            employee=EMPLOYEE, settings=SETTINGS, existing=pending, at=_at(8, 0), position=OFFICE, similarity=0.9
        )
    with pytest.raises(ValidationError):
        evaluator.check_out(
            employee=EMPLOYEE, settings=SETTINGS, existing=yesterday, at=_at(17, 0), position=OFFICE, similarity=0.9
        )
