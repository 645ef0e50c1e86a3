from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.evaluator import AttendanceEvaluator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import load_timezone
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .face.client import FacePlusPlusClient
from .leave.ledger import LeaveBalanceLedger
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .settings.mysql_settings_repository import MySQLOfficeSettingsRepository
from .settings.service import OfficeSettingsService
from .storage.photo_storage import LocalPhotoStorage


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: Any
    settings_repo: Any
    attendance_repo: Any
    leave_repo: Any

    evaluator: AttendanceEvaluator

    employee_service: EmployeeService
    settings_service: OfficeSettingsService
    attendance_service: AttendanceService
    leave_service: LeaveService

    photo_storage: Optional[LocalPhotoStorage] = None


def build_container(*, db_config: dict, settings: Any) -> Container:
    """Wire the MySQL repositories and the external collaborators from a settings module."""
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    settings_repo = MySQLOfficeSettingsRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leave_repo = MySQLLeaveRepository(conn)

    tz = load_timezone(getattr(settings, "ORG_TIMEZONE", DEFAULT_TIMEZONE))
    evaluator = AttendanceEvaluator(tz, strategy_factory=AttendanceStrategyFactory())

    face = FacePlusPlusClient(
        api_key=getattr(settings, "FACEPP_API_KEY", ""),
        api_secret=getattr(settings, "FACEPP_API_SECRET", ""),
        base_url=getattr(settings, "FACEPP_BASE_URL", "https://api-us.faceplusplus.com"),
        timeout=float(getattr(settings, "FACEPP_TIMEOUT", 10.0)),
    )
    storage = LocalPhotoStorage(
        getattr(settings, "PHOTO_STORAGE_DIR", "photos"),
        base_url=getattr(settings, "PHOTO_BASE_URL", "/photos"),
    )

    employee_service = EmployeeService(employees_repo, face=face, storage=storage)
    settings_service = OfficeSettingsService(settings_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        settings_repo,
        evaluator=evaluator,
        face=face,
        storage=storage,
    )
    leave_service = LeaveService(leave_repo, employees_repo, ledger=LeaveBalanceLedger())

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        settings_repo=settings_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        evaluator=evaluator,
        employee_service=employee_service,
        settings_service=settings_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        photo_storage=storage,
    )
