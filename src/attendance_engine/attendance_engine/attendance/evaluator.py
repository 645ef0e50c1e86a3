from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import at_local_time, attendance_date_for, to_local
from ..common.validators import Coordinates
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    DuplicateCheckIn,
    DuplicateCheckOut,
    EmployeeInactive,
    FaceNotEnrolled,
    FaceVerificationFailed,
    NoCheckInFound,
    ValidationError,
)
from ..employees.model import Employee
from ..settings.model import OfficeSettings
from .face_gate import FaceMatch, evaluate_face_match
from .factory import AttendanceStrategyFactory
from .geofence import GeofenceResult, check_geofence
from .model import AttendanceRecord
from .work_time import work_duration_minutes


@dataclass(frozen=True)
class CheckInDecision:
    employee_id: int
    attendance_date: date
    check_in_at: datetime
    expected_check_in: datetime
    geofence: GeofenceResult
    face: FaceMatch
    status: AttendanceStatus
    late_minutes: int
    settings_version: int
    note: Optional[str] = None


@dataclass(frozen=True)
class CheckOutDecision:
    employee_id: int
    attendance_date: date
    check_out_at: datetime
    expected_check_out: datetime
    geofence: GeofenceResult
    face: FaceMatch
    status: AttendanceStatus
    early_leave_minutes: int
    work_duration_minutes: int
    settings_version: int
    note: Optional[str] = None


class AttendanceEvaluator:
    """Decides one check-in or check-out from already-fetched inputs.

    Per attendance date a record moves ``no record -> checked in -> checked out``.
    Nothing here touches storage or the clock: the caller passes the instant, the
    office settings in force and today's record (if any).
    """

    def __init__(self, tz: ZoneInfo, *, strategy_factory: Optional[AttendanceStrategyFactory] = None):
        self._tz = tz
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @property
    def timezone(self) -> ZoneInfo:
        return self._tz

    def attendance_date(self, at: datetime) -> date:
        return attendance_date_for(at, self._tz)

    @staticmethod
    def ensure_eligible(employee: Employee) -> None:
        if not employee.is_active:
            raise EmployeeInactive("Employee account is deactivated")
        if not employee.is_face_enrolled:
            raise FaceNotEnrolled("Face is not enrolled yet. Please enroll your face first.")

    @staticmethod
    def ensure_can_check_in(existing: Optional[AttendanceRecord]) -> None:
        if existing is not None and existing.check_in is not None:
            raise DuplicateCheckIn("Already checked in today")

    @staticmethod
    def ensure_can_check_out(existing: Optional[AttendanceRecord]) -> None:
        if existing is None or existing.check_in is None:
            raise NoCheckInFound("No check-in found for today")
        if existing.check_out is not None:
            raise DuplicateCheckOut("Already checked out today")

    def _verify(self, *, settings: OfficeSettings, position: Coordinates, similarity: float) -> tuple[GeofenceResult, FaceMatch]:
        geofence = check_geofence(
            position,
            Coordinates(latitude=settings.latitude, longitude=settings.longitude),
            settings.radius_meters,
        )
        face = evaluate_face_match(similarity, settings.face_similarity_threshold)
        if not face.verified:
            raise FaceVerificationFailed(
                f"Face does not match (similarity {face.score:.2f} < threshold {face.threshold:.2f})"
            )
        return geofence, face

    def check_in(
        self,
        *,
        employee: Employee,
        settings: OfficeSettings,
        existing: Optional[AttendanceRecord],
        at: datetime,
        position: Coordinates,
        similarity: float,
    ) -> CheckInDecision:
        self.ensure_eligible(employee)
        local_at = to_local(at, self._tz)
        today = local_at.date()
        if existing is not None and existing.attendance_date != today:
            raise ValidationError("Attendance record belongs to another attendance date")
        self.ensure_can_check_in(existing)

        geofence, face = self._verify(settings=settings, position=position, similarity=similarity)

        expected = at_local_time(today, settings.default_check_in, self._tz)
        grace = int(settings.late_tolerance_minutes)
        strategy = self._factory.for_checkin(check_in_at=local_at, expected_check_in=expected, grace_minutes=grace)
        decision = strategy.decide_checkin(check_in_at=local_at, expected_check_in=expected, grace_minutes=grace)

        return CheckInDecision(
            employee_id=employee.employee_id,
            attendance_date=today,
            check_in_at=at,
            expected_check_in=expected,
            geofence=geofence,
            face=face,
            status=decision.status,
            late_minutes=decision.late_minutes,
            settings_version=settings.version,
            note=decision.note,
        )

    def check_out(
        self,
        *,
        employee: Employee,
        settings: OfficeSettings,
        existing: Optional[AttendanceRecord],
        at: datetime,
        position: Coordinates,
        similarity: float,
    ) -> CheckOutDecision:
        self.ensure_eligible(employee)
        local_at = to_local(at, self._tz)
        today = local_at.date()
        if existing is not None and existing.attendance_date != today:
            raise ValidationError("Attendance record belongs to another attendance date")
        self.ensure_can_check_out(existing)

        geofence, face = self._verify(settings=settings, position=position, similarity=similarity)

        expected = at_local_time(today, settings.default_check_out, self._tz)
        strategy = self._factory.for_checkout(check_out_at=local_at, expected_check_out=expected)
        decision = strategy.decide_checkout(check_out_at=local_at, expected_check_out=expected, current=existing.status)

        return CheckOutDecision(
            employee_id=employee.employee_id,
            attendance_date=today,
            check_out_at=at,
            expected_check_out=expected,
            geofence=geofence,
            face=face,
            status=decision.status,
            early_leave_minutes=decision.early_leave_minutes,
            work_duration_minutes=work_duration_minutes(existing.check_in.at, at),
            settings_version=settings.version,
            note=decision.note,
        )
