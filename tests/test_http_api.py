from __future__ import annotations

import base64
from datetime import time
from zoneinfo import ZoneInfo

import pytest

from src.attendance_engine.attendance_engine.attendance.evaluator import AttendanceEvaluator
from src.attendance_engine.attendance_engine.attendance.service import AttendanceService
from src.attendance_engine.attendance_engine.common.validators import validate_photo_payload
from src.attendance_engine.attendance_engine.container import Container
from src.attendance_engine.attendance_engine.core.enums import Role
from src.attendance_engine.attendance_engine.employees.model import Employee
from src.attendance_engine.attendance_engine.employees.service import EmployeeService
from src.attendance_engine.attendance_engine.leave.model import LeaveType
from src.attendance_engine.attendance_engine.leave.service import LeaveService
from src.attendance_engine.attendance_engine.main import create_app
from src.attendance_engine.attendance_engine.settings.model import OfficeSettings
from src.attendance_engine.attendance_engine.settings.service import OfficeSettingsService
from src.attendance_engine.attendance_engine.storage.photo_storage import LocalPhotoStorage

SETTINGS = OfficeSettings(
    settings_id=1,
    version=1,
    office_name="Head Office",
    latitude=-6.2088,
    longitude=106.8456,
    radius_meters=100,
    default_check_in=time(8, 0),
    default_check_out=time(17, 0),
    late_tolerance_minutes=15,
    face_similarity_threshold=0.8,
)


class FakeSettingsRepo:
    def __init__(self):
        self.current = SETTINGS

    def get_active(self):
        return self.current

    def save(self, settings, *, expected_version):
        self.current = settings
        return True


class FakeEmployeesRepo:
    def __init__(self):
        self.rows = {
            1: Employee(employee_id=1, name="Admin", email="admin@example.com", role=Role.ADMIN),
            2: Employee(employee_id=2, name="Dewi", email="dewi@example.com", role=Role.EMPLOYEE, face_token="secret"),
        }

    def get_by_id(self, employee_id):
        return self.rows.get(int(employee_id))


class FakeLeaveRepo:
    def list_leave_types(self, *, active_only=True):
        return [LeaveType(leave_type_id=1, name="Annual Leave", code="ANNUAL", default_quota=12)]

    def list_balances(self, *, employee_id, year):
        return []


class ExplodingAttendanceRepo:
    def get_recent_for_employee(self, employee_id, limit):
        raise RuntimeError("boom")


class UnusedFace:
    def compare(self, face_token, photo):
        raise AssertionError("face service must not be called")


@pytest.fixture
def photo_storage(tmp_path):
    return LocalPhotoStorage(tmp_path / "photos")


@pytest.fixture
def client(monkeypatch, photo_storage):
    monkeypatch.setenv("APP_ENV", "testing")
    tz = ZoneInfo("Asia/Jakarta")
    employees = FakeEmployeesRepo()
    settings = FakeSettingsRepo()
    attendance = ExplodingAttendanceRepo()
    leave = FakeLeaveRepo()
    evaluator = AttendanceEvaluator(tz)

    container = Container(
        conn=None,
        employees_repo=employees,
        settings_repo=settings,
        attendance_repo=attendance,
        leave_repo=leave,
        evaluator=evaluator,
        employee_service=EmployeeService(employees),
        settings_service=OfficeSettingsService(settings),
        attendance_service=AttendanceService(attendance, employees, settings, evaluator=evaluator, face=UnusedFace()),
        leave_service=LeaveService(leave, employees),
        photo_storage=photo_storage,
    )
    app = create_app(container)
    return app.test_client()


def _login(client, employee_id, role):
    with client.session_transaction() as sess:
        sess["employee_id"] = employee_id
        sess["role"] = role


def test_requires_session(client):
    resp = client.get("/api/admin/settings")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_settings_readable_by_employee(client):
    _login(client, 2, "employee")

    resp = client.get("/api/admin/settings")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["default_check_in"] == "08:00:00"
    assert data["version"] == 1


def test_settings_update_requires_admin(client):
    _login(client, 2, "employee")

    resp = client.patch("/api/admin/settings", json={"radius_meters": 200})

    assert resp.status_code == 403


def test_settings_update_validation_maps_to_400(client):
    _login(client, 1, "admin")

    resp = client.patch("/api/admin/settings", json={"radius_meters": 5})

    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "ValidationError"


def test_settings_update_with_stale_version_maps_to_409(client):
    _login(client, 1, "admin")

    resp = client.patch("/api/admin/settings", json={"radius_meters": 200, "version": 5})

    assert resp.status_code == 409
    assert resp.get_json()["kind"] == "ConcurrentUpdate"


def test_check_in_with_bad_photo_maps_to_400(client):
    _login(client, 2, "employee")

    resp = client.post(
        "/api/attendance/check-in",
        json={"employee_id": 2, "latitude": -6.2, "longitude": 106.8, "photo_base64": "nope"},
    )

    assert resp.status_code == 400


def test_check_in_for_someone_else_maps_to_403(client):
    _login(client, 2, "employee")

    resp = client.post(
        "/api/attendance/check-in",
        json={"employee_id": 1, "latitude": -6.2, "longitude": 106.8, "photo_base64": "data:image/png;base64,AAAA"},
    )

    assert resp.status_code == 403


def test_unexpected_errors_are_500(client):
    _login(client, 2, "employee")

    resp = client.get("/api/attendance/history")

    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Internal server error"


def test_employee_json_hides_face_token(client):
    _login(client, 2, "employee")

    resp = client.get("/api/employees/2")

    assert resp.status_code == 200
    body = resp.get_json()["data"]
    assert "face_token" not in body
    assert body["email"] == "dewi@example.com"


def test_leave_balance_includes_remaining(client):
    _login(client, 2, "employee")

    resp = client.get("/api/leave/balance?year=2025")

    assert resp.status_code == 200
    assert resp.get_json()["data"] == [
        {
            "balance_id": None,
            "employee_id": 2,
            "leave_type_id": 1,
            "year": 2025,
            "quota": 12,
            "used": 0,
            "remaining": 12,
        }
    ]


def test_leave_types(client):
    _login(client, 2, "employee")

    resp = client.get("/api/leave/types")

    assert resp.status_code == 200
    assert resp.get_json()["data"][0]["code"] == "ANNUAL"


@pytest.mark.parametrize(
    "employee_id, role",
    [(2, "manager"), ("abc", "employee"), (None, "employee"), (0, "employee"), (2, None)],
)
def test_malformed_session_is_401(client, employee_id, role):
    _login(client, employee_id, role)

    assert client.get("/api/leave/types").status_code == 401
    assert client.patch("/api/admin/settings", json={"radius_meters": 200}).status_code == 401


def _stored_photo(photo_storage):
    photo = validate_photo_payload("data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff stored").decode())
    return photo_storage.save(bucket="attendance-photos", key="2/check_in_1741000000000.jpg", photo=photo)


def test_stored_photo_is_served_to_its_owner(client, photo_storage):
    url = _stored_photo(photo_storage)
    _login(client, 2, "employee")

    resp = client.get(url)

    assert url == "/photos/attendance-photos/2/check_in_1741000000000.jpg"
    assert resp.status_code == 200
    assert resp.data == b"\xff\xd8\xff stored"


def test_stored_photo_is_served_to_admin(client, photo_storage):
    url = _stored_photo(photo_storage)
    _login(client, 1, "admin")

    assert client.get(url).status_code == 200


def test_stored_photo_hidden_from_other_employees(client, photo_storage):
    url = _stored_photo(photo_storage)
    _login(client, 3, "employee")

    assert client.get(url).status_code == 403


def test_stored_photo_requires_session(client, photo_storage):
    assert client.get(_stored_photo(photo_storage)).status_code == 401


def test_missing_photo_is_404(client):
    _login(client, 2, "employee")

    assert client.get("/photos/attendance-photos/2/nothing.jpg").status_code == 404


def test_analytics_requires_admin(client):
    _login(client, 2, "employee")

    assert client.get("/api/admin/analytics?period=week").status_code == 403
