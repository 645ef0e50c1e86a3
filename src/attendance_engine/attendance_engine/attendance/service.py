from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from ..common.actor import Actor
from ..common.datetime_utils import now_utc
from ..common.validators import PhotoPayload, require_positive_int, validate_coordinates, validate_photo_payload
from ..core.constants import ANALYTICS_PERIOD_DAYS, DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, CheckKind
from ..core.exceptions import (
    AuthorizationError,
    DependencyFailure,
    DuplicateCheckIn,
    DuplicateCheckOut,
    NotFoundError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..face.client import FaceRecognizer
from ..settings.model import OfficeSettings
from ..settings.repository import OfficeSettingsRepository
from ..storage.photo_storage import PhotoStorage, photo_key
from .evaluator import AttendanceEvaluator, CheckInDecision, CheckOutDecision
from .model import AttendanceAnalytics, AttendanceRecord, AttendanceSummary, CheckEvent
from .repository import AttendanceRepository
from .work_time import format_duration

logger = logging.getLogger(__name__)

PHOTO_BUCKET = "attendance-photos"


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceRecord
    decision: CheckInDecision

    @property
    def message(self) -> str:
        if self.decision.status == AttendanceStatus.LATE:
            return f"Check-in successful. You are {self.decision.late_minutes} minutes late."
        return "Check-in successful. Have a good day!"


@dataclass(frozen=True)
class CheckOutResult:
    record: AttendanceRecord
    decision: CheckOutDecision

    @property
    def message(self) -> str:
        return "Check-out successful. Enjoy your rest!"

    @property
    def work_duration(self) -> str:
        return format_duration(self.decision.work_duration_minutes)


class AttendanceService:
    """Use case: check-in/check-out with GPS + face verification, and attendance queries.

    Collaborators (store, face service, photo storage) are injected; every business
    decision is delegated to ``AttendanceEvaluator``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: OfficeSettingsRepository,
        *,
        evaluator: AttendanceEvaluator,
        face: FaceRecognizer,
        storage: Optional[PhotoStorage] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._evaluator = evaluator
        self._face = face
        self._storage = storage
        self._clock = clock

    def _load(self, employee_id: int) -> tuple[Employee, OfficeSettings]:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        settings = self._settings.get_active()
        if not settings:
            raise NotFoundError("Office settings are not configured")
        return employee, settings

    def _store_photo(self, *, employee_id: int, kind: CheckKind, at: datetime, photo: PhotoPayload) -> tuple[Optional[str], Optional[str]]:
        """Returns ``(key, url)``; both None when no storage is configured."""
        if self._storage is None:
            return None, None
        key = photo_key(owner_id=employee_id, kind=kind.value, at=at, photo=photo)
        return key, self._storage.save(bucket=PHOTO_BUCKET, key=key, photo=photo)

    def _discard_photo(self, key: Optional[str]) -> None:
        """Remove a photo whose attendance write failed."""
        if self._storage is None or key is None:
            return
        try:
            self._storage.delete(bucket=PHOTO_BUCKET, key=key)
        except DependencyFailure:
            logger.warning("orphaned attendance photo %s/%s left in storage", PHOTO_BUCKET, key)

    @staticmethod
    def _authorize(actor: Actor, employee_id: int) -> None:
        if actor.employee_id != employee_id:
            raise AuthorizationError("You can only record your own attendance")

    def check_in(self, *, actor: Actor, employee_id: Any, latitude: Any, longitude: Any, photo_base64: Any) -> CheckInResult:
        employee_id = require_positive_int(employee_id, "employee_id")
        position = validate_coordinates(latitude, longitude)
        photo = validate_photo_payload(photo_base64)
        self._authorize(actor, employee_id)

        now = self._clock()
        employee, settings = self._load(employee_id)
        self._evaluator.ensure_eligible(employee)

        today = self._evaluator.attendance_date(now)
        existing = self._attendance.get_for_employee_and_date(employee_id, today)
        self._evaluator.ensure_can_check_in(existing)

        similarity = self._face.compare(employee.face_token, photo)
        decision = self._evaluator.check_in(
            employee=employee,
            settings=settings,
            existing=existing,
            at=now,
            position=position,
            similarity=similarity,
        )

        stored_key, photo_url = self._store_photo(employee_id=employee_id, kind=CheckKind.CHECK_IN, at=now, photo=photo)
        event = CheckEvent(
            at=decision.check_in_at,
            latitude=position.latitude,
            longitude=position.longitude,
            photo_url=photo_url,
            face_verified=decision.face.verified,
            location_verified=decision.geofence.verified,
        )

        try:
            if existing is None:
                attendance_id = self._attendance.create_check_in(
                    employee_id=employee_id,
                    attendance_date=decision.attendance_date,
                    check_in=event,
                    late_minutes=decision.late_minutes,
                    status=decision.status,
                    notes=decision.note,
                )
            else:
                attendance_id = existing.attendance_id
                if not self._attendance.record_check_in(
                    attendance_id=attendance_id,
                    check_in=event,
                    late_minutes=decision.late_minutes,
                    status=decision.status,
                    notes=decision.note,
                ):
                    raise DuplicateCheckIn("Already checked in today")
        except Exception:
            self._discard_photo(stored_key)
            raise

        if not decision.geofence.verified:
            logger.warning(
                "check-in outside geofence: employee=%s distance=%.0fm radius=%.0fm",
                employee_id,
                decision.geofence.distance_meters,
                decision.geofence.radius_meters,
            )
        logger.info(
            "check-in employee=%s date=%s status=%s late=%s settings_v=%s",
            employee_id,
            decision.attendance_date,
            decision.status.value,
            decision.late_minutes,
            decision.settings_version,
        )

        record = AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=employee_id,
            attendance_date=decision.attendance_date,
            status=decision.status,
            check_in=event,
            late_minutes=decision.late_minutes,
            notes=decision.note or (existing.notes if existing else None),
        )
        return CheckInResult(record=record, decision=decision)

    def check_out(self, *, actor: Actor, employee_id: Any, latitude: Any, longitude: Any, photo_base64: Any) -> CheckOutResult:
        employee_id = require_positive_int(employee_id, "employee_id")
        position = validate_coordinates(latitude, longitude)
        photo = validate_photo_payload(photo_base64)
        self._authorize(actor, employee_id)

        now = self._clock()
        employee, settings = self._load(employee_id)
        self._evaluator.ensure_eligible(employee)

        today = self._evaluator.attendance_date(now)
        existing = self._attendance.get_for_employee_and_date(employee_id, today)
        self._evaluator.ensure_can_check_out(existing)

        similarity = self._face.compare(employee.face_token, photo)
        decision = self._evaluator.check_out(
            employee=employee,
            settings=settings,
            existing=existing,
            at=now,
            position=position,
            similarity=similarity,
        )

        stored_key, photo_url = self._store_photo(employee_id=employee_id, kind=CheckKind.CHECK_OUT, at=now, photo=photo)
        event = CheckEvent(
            at=decision.check_out_at,
            latitude=position.latitude,
            longitude=position.longitude,
            photo_url=photo_url,
            face_verified=decision.face.verified,
            location_verified=decision.geofence.verified,
        )

        try:
            if not self._attendance.record_check_out(
                attendance_id=existing.attendance_id,
                check_out=event,
                early_leave_minutes=decision.early_leave_minutes,
                work_duration_minutes=decision.work_duration_minutes,
                status=decision.status,
                notes=decision.note,
            ):
                raise DuplicateCheckOut("Already checked out today")
        except Exception:
            self._discard_photo(stored_key)
            raise

        if not decision.geofence.verified:
            logger.warning(
                "check-out outside geofence: employee=%s distance=%.0fm radius=%.0fm",
                employee_id,
                decision.geofence.distance_meters,
                decision.geofence.radius_meters,
            )
        logger.info(
            "check-out employee=%s date=%s early_leave=%s worked=%s",
            employee_id,
            decision.attendance_date,
            decision.early_leave_minutes,
            decision.work_duration_minutes,
        )

        record = replace(
            existing,
            status=decision.status,
            check_out=event,
            early_leave_minutes=decision.early_leave_minutes,
            work_duration_minutes=decision.work_duration_minutes,
            notes=decision.note or existing.notes,
        )
        return CheckOutResult(record=record, decision=decision)

    def get_today(self, *, actor: Actor, employee_id: Optional[int] = None) -> Optional[AttendanceRecord]:
        employee_id = int(employee_id or actor.employee_id)
        if not actor.is_admin and employee_id != actor.employee_id:
            raise AuthorizationError("You can only view your own attendance")
        today = self._evaluator.attendance_date(self._clock())
        return self._attendance.get_for_employee_and_date(employee_id, today)

    def get_history(self, *, actor: Actor, employee_id: Optional[int] = None, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        employee_id = int(employee_id or actor.employee_id)
        if not actor.is_admin and employee_id != actor.employee_id:
            raise AuthorizationError("You can only view your own attendance")
        if limit <= 0:
            raise ValidationError("limit must be positive")
        return self._attendance.get_recent_for_employee(employee_id, min(int(limit), 366))

    def list_between(
        self,
        *,
        actor: Actor,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can list all attendance")
        if end_date < start_date:
            raise ValidationError("end_date must be on or after start_date")
        return self._attendance.list_between(
            start_date=start_date,
            end_date=end_date,
            employee_id=employee_id,
            status=status,
        )

    def summarize(self, *, actor: Actor, start_date: date, end_date: date, employee_id: Optional[int] = None) -> AttendanceSummary:
        rows = self.list_between(actor=actor, start_date=start_date, end_date=end_date, employee_id=employee_id)
        counts = Counter(r.status for r in rows)
        return AttendanceSummary(
            start_date=start_date,
            end_date=end_date,
            total_records=len(rows),
            present=counts[AttendanceStatus.PRESENT],
            late=counts[AttendanceStatus.LATE],
            absent=counts[AttendanceStatus.ABSENT],
            leave=counts[AttendanceStatus.LEAVE],
            half_day=counts[AttendanceStatus.HALF_DAY],
            total_late_minutes=sum(r.late_minutes for r in rows),
            total_early_leave_minutes=sum(r.early_leave_minutes for r in rows),
        )

    def analytics(self, *, actor: Actor, period: str = "today") -> AttendanceAnalytics:
        """Dashboard overview for ``today``, the last 7 days (``week``) or the last 30 (``month``)."""
        if not actor.is_admin:
            raise AuthorizationError("Only admins can view analytics")
        days = ANALYTICS_PERIOD_DAYS.get(period)
        if days is None:
            raise ValidationError(f"period must be one of: {', '.join(ANALYTICS_PERIOD_DAYS)}")

        today = self._evaluator.attendance_date(self._clock())
        start_date = today - timedelta(days=days - 1)

        departments = self._employees.count_by_department(active=True)
        total_employees = sum(departments.values())
        counts = self._attendance.count_between(start_date=start_date, end_date=today)

        tz = self._evaluator.timezone
        local_minutes = [
            t.hour * 60 + t.minute
            for t in (at.astimezone(tz) for at in self._attendance.list_check_in_times(start_date=start_date, end_date=today))
        ]
        average_check_in_time = None
        if local_minutes:
            avg = round(sum(local_minutes) / len(local_minutes))
            average_check_in_time = f"{avg // 60:02d}:{avg % 60:02d}"

        by_hour = Counter(
            at.astimezone(tz).hour for at in self._attendance.list_check_in_times(start_date=today, end_date=today)
        )

        return AttendanceAnalytics(
            period=period,
            start_date=start_date,
            end_date=today,
            total_employees=total_employees,
            check_ins=counts.check_ins,
            check_outs=counts.check_outs,
            attendance_rate=_percent(counts.check_ins, total_employees * days),
            average_check_in_time=average_check_in_time,
            late_check_ins=counts.late,
            face_verified=counts.face_verified,
            face_verification_rate=_percent(counts.face_verified, counts.check_ins),
            location_verified=counts.location_verified,
            location_verification_rate=_percent(counts.location_verified, counts.check_ins),
            departments=dict(departments),
            check_ins_by_hour=dict(sorted(by_hour.items())),
        )


def _percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part * 100 / whole, 1)
