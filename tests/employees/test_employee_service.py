from __future__ import annotations

import base64
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from src.attendance_engine.attendance_engine.common.actor import Actor
from src.attendance_engine.attendance_engine.core.enums import Role
from src.attendance_engine.attendance_engine.core.exceptions import (
    AuthorizationError,
    DependencyFailure,
    FaceDetectionFailed,
    NotFoundError,
    ValidationError,
)
from src.attendance_engine.attendance_engine.employees.model import Employee
from src.attendance_engine.attendance_engine.employees.service import EmployeeService
from src.attendance_engine.attendance_engine.face.model import FaceDetection

NOW = datetime(2025, 3, 3, 1, 0, tzinfo=timezone.utc)
PHOTO = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
ADMIN = Actor(employee_id=1, role=Role.ADMIN)
EMPLOYEE_ACTOR = Actor(employee_id=2, role=Role.EMPLOYEE)


class FakeEmployeesRepo:
    def __init__(self, *employees):
        self.rows = {e.employee_id: e for e in employees}
        self._next_id = max(self.rows, default=0) + 1

    def get_by_id(self, employee_id):
        return self.rows.get(int(employee_id))

    def get_by_email(self, email):
        return next((e for e in self.rows.values() if e.email == email), None)

    def list(self, *, active=None):
        return [e for e in self.rows.values() if active is None or e.is_active == active]

    def create(self, *, name, email, role, phone=None, department=None, position=None):
        eid = self._next_id
        self._next_id += 1
        self.rows[eid] = Employee(
            employee_id=eid, name=name, email=email, role=role, phone=phone, department=department, position=position
        )
        return eid

    def update_profile(self, *, employee_id, name, email, role, phone, department, position):
        self.rows[employee_id] = replace(
            self.rows[employee_id], name=name, email=email, role=role, phone=phone, department=department, position=position
        )
        return True

    def set_active(self, employee_id, *, is_active):
        self.rows[employee_id] = replace(self.rows[employee_id], is_active=is_active)
        return True

    def set_face(self, *, employee_id, face_token, face_image_url, enrolled_at):
        self.rows[employee_id] = replace(
            self.rows[employee_id], face_token=face_token, face_image_url=face_image_url, face_enrolled_at=enrolled_at
        )
        return True


class FakeFace:
    def __init__(self, detection=None, error=None):
        self.detection = detection
        self.error = error

    def detect(self, photo):
        if self.error:
            raise self.error
        return self.detection


class FakeStorage:
    def __init__(self):
        self.saved = []
        self.deleted = []

    def save(self, *, bucket, key, photo):
        self.saved.append((bucket, key))
        return f"/photos/{bucket}/{key}"

    def delete(self, *, bucket, key):
        self.deleted.append((bucket, key))


class BrokenFaceWriteRepo(FakeEmployeesRepo):
    def set_face(self, *, employee_id, face_token, face_image_url, enrolled_at):
        raise DependencyFailure("Database unavailable")


def _repo():
    return FakeEmployeesRepo(
        Employee(employee_id=1, name="Admin", email="admin@example.com", role=Role.ADMIN),
        Employee(employee_id=2, name="Dewi", email="dewi@example.com", role=Role.EMPLOYEE),
    )


def _service(repo, face=None, storage=None):
    face = face or FakeFace(FaceDetection(face_token="tok-new", quality=88.0))
    return EmployeeService(repo, face=face, storage=storage or FakeStorage(), clock=lambda: NOW)


def test_create_employee():
    repo = _repo()
    created = _service(repo).create(
        actor=ADMIN, data={"name": " Budi ", "email": "Budi@Example.com", "department": "Finance"}
    )

    assert created.name == "Budi"
    assert created.email == "budi@example.com"
    assert created.role == Role.EMPLOYEE
    assert created.department == "Finance"


def test_create_rejects_duplicate_email():
    with pytest.raises(ValidationError):
        _service(_repo()).create(actor=ADMIN, data={"name": "Other", "email": "dewi@example.com"})


@pytest.mark.parametrize("data", [{"email": "x@example.com"}, {"name": "X", "email": "not-an-email"}, {"name": "X", "email": "x@example.com", "role": "boss"}])
def test_create_validation(data):
    with pytest.raises(ValidationError):
        _service(_repo()).create(actor=ADMIN, data=data)


def test_only_admin_manages_employees():
    with pytest.raises(AuthorizationError):
        _service(_repo()).create(actor=EMPLOYEE_ACTOR, data={"name": "X", "email": "x@example.com"})


def test_update_profile_fields():
    updated = _service(_repo()).update(actor=ADMIN, employee_id=2, data={"position": "Lead", "phone": ""})

    assert updated.position == "Lead"
    assert updated.phone is None
    assert updated.name == "Dewi"


def test_admin_cannot_demote_self():
    with pytest.raises(ValidationError):
        _service(_repo()).update(actor=ADMIN, employee_id=1, data={"role": "employee"})


def test_deactivate_keeps_the_row():
    repo = _repo()
    deactivated = _service(repo).deactivate(actor=ADMIN, employee_id=2)

    assert deactivated.is_active is False
    assert 2 in repo.rows
    assert _service(repo).list(actor=ADMIN, active=True) == [repo.rows[1]]


def test_cannot_deactivate_self():
    with pytest.raises(ValidationError):
        _service(_repo()).deactivate(actor=ADMIN, employee_id=1)


def test_get_missing_employee():
    with pytest.raises(NotFoundError):
        _service(_repo()).get(99)


def test_enroll_face_stores_token_and_photo():
    repo = _repo()
    enrolled = _service(repo).enroll_face(actor=EMPLOYEE_ACTOR, employee_id=2, photo_base64=PHOTO)

    assert enrolled.face_token == "tok-new"
    assert enrolled.is_face_enrolled is True
    assert enrolled.face_enrolled_at == NOW
    assert enrolled.face_image_url.startswith("/photos/employee-faces/2/face_")
    assert enrolled.face_image_url.endswith(".png")


def test_enroll_face_detection_failure_changes_nothing():
    repo = _repo()
    service = _service(repo, face=FakeFace(error=FaceDetectionFailed("No face detected")))

    with pytest.raises(FaceDetectionFailed):
        service.enroll_face(actor=EMPLOYEE_ACTOR, employee_id=2, photo_base64=PHOTO)
    assert repo.rows[2].face_token is None


def test_cannot_enroll_someone_elses_face():
    with pytest.raises(AuthorizationError):
        _service(_repo()).enroll_face(actor=EMPLOYEE_ACTOR, employee_id=1, photo_base64=PHOTO)


def test_enroll_face_removes_photo_when_save_fails():
    repo = BrokenFaceWriteRepo(*_repo().rows.values())
    storage = FakeStorage()

    with pytest.raises(DependencyFailure):
        _service(repo, storage=storage).enroll_face(actor=EMPLOYEE_ACTOR, employee_id=2, photo_base64=PHOTO)

    assert len(storage.saved) == 1
    assert storage.deleted == storage.saved
    assert repo.rows[2].face_token is None
