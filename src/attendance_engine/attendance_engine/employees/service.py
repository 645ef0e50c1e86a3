from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.actor import Actor
from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty, validate_photo_payload
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DependencyFailure, NotFoundError, ValidationError
from ..face.client import FaceRecognizer
from ..storage.photo_storage import PhotoStorage, photo_key
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

FACE_BUCKET = "employee-faces"


def _optional_text(value: Any) -> Optional[str]:
    v = str(value or "").strip()
    return v or None


def _parse_role(value: Any) -> Role:
    try:
        return Role(str(value or Role.EMPLOYEE.value).strip().lower())
    except ValueError:
        raise ValidationError("role must be 'admin' or 'employee'")


class EmployeeService:
    """Use case: manage employees (admin) and face enrollment."""

    def __init__(
        self,
        employees: EmployeeRepository,
        *,
        face: Optional[FaceRecognizer] = None,
        storage: Optional[PhotoStorage] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._employees = employees
        self._face = face
        self._storage = storage
        self._clock = clock

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can manage employees")

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get_for(self, *, actor: Actor, employee_id: int) -> Employee:
        if not actor.is_admin and actor.employee_id != int(employee_id):
            raise AuthorizationError("You can only view your own profile")
        return self.get(employee_id)

    def list(self, *, actor: Actor, active: Optional[bool] = None) -> Sequence[Employee]:
        self._require_admin(actor)
        return self._employees.list(active=active)

    def create(self, *, actor: Actor, data: dict[str, Any]) -> Employee:
        self._require_admin(actor)

        name = require_non_empty(data.get("name"), "name")
        email = require_non_empty(data.get("email"), "email").lower()
        if not _EMAIL_RE.match(email):
            raise ValidationError("email is invalid")
        if self._employees.get_by_email(email):
            raise ValidationError("Email is already registered")

        employee_id = self._employees.create(
            name=name,
            email=email,
            role=_parse_role(data.get("role")),
            phone=_optional_text(data.get("phone")),
            department=_optional_text(data.get("department")),
            position=_optional_text(data.get("position")),
        )
        logger.info("employee %s created by admin %s", employee_id, actor.employee_id)
        return self.get(employee_id)

    def update(self, *, actor: Actor, employee_id: int, data: dict[str, Any]) -> Employee:
        self._require_admin(actor)
        current = self.get(employee_id)

        email = current.email
        if "email" in data:
            email = require_non_empty(data.get("email"), "email").lower()
            if not _EMAIL_RE.match(email):
                raise ValidationError("email is invalid")
            other = self._employees.get_by_email(email)
            if other and other.employee_id != current.employee_id:
                raise ValidationError("Email is already registered")

        role = _parse_role(data["role"]) if "role" in data else current.role
        if current.employee_id == actor.employee_id and role != Role.ADMIN:
            raise ValidationError("You cannot remove your own admin role")

        self._employees.update_profile(
            employee_id=current.employee_id,
            name=require_non_empty(data["name"], "name") if "name" in data else current.name,
            email=email,
            role=role,
            phone=_optional_text(data["phone"]) if "phone" in data else current.phone,
            department=_optional_text(data["department"]) if "department" in data else current.department,
            position=_optional_text(data["position"]) if "position" in data else current.position,
        )
        return self.get(employee_id)

    def deactivate(self, *, actor: Actor, employee_id: int) -> Employee:
        """Employees are never hard-deleted; attendance and leave rows keep referring to them."""
        self._require_admin(actor)
        employee = self.get(employee_id)
        if employee.employee_id == actor.employee_id:
            raise ValidationError("You cannot deactivate your own account")
        self._employees.set_active(employee.employee_id, is_active=False)
        logger.info("employee %s deactivated by admin %s", employee.employee_id, actor.employee_id)
        return self.get(employee_id)

    def activate(self, *, actor: Actor, employee_id: int) -> Employee:
        self._require_admin(actor)
        employee = self.get(employee_id)
        self._employees.set_active(employee.employee_id, is_active=True)
        return self.get(employee_id)

    def enroll_face(self, *, actor: Actor, employee_id: int, photo_base64: Any) -> Employee:
        """Register (or replace) the employee's face token."""
        if not actor.is_admin and actor.employee_id != int(employee_id):
            raise AuthorizationError("You can only enroll your own face")
        if self._face is None:
            raise ValidationError("Face recognition is not configured")

        photo = validate_photo_payload(photo_base64)
        employee = self.get(employee_id)
        detection = self._face.detect(photo)

        now = self._clock()
        key, image_url = None, None
        if self._storage is not None:
            key = photo_key(owner_id=employee.employee_id, kind="face", at=now, photo=photo)
            image_url = self._storage.save(bucket=FACE_BUCKET, key=key, photo=photo)

        try:
            self._employees.set_face(
                employee_id=employee.employee_id,
                face_token=detection.face_token,
                face_image_url=image_url,
                enrolled_at=now,
            )
        except Exception:
            if key is not None:
                try:
                    self._storage.delete(bucket=FACE_BUCKET, key=key)
                except DependencyFailure:
                    logger.warning("orphaned face photo %s/%s left in storage", FACE_BUCKET, key)
            raise
        logger.info(
            "face %s for employee %s (quality %.1f)",
            "re-enrolled" if employee.is_face_enrolled else "enrolled",
            employee.employee_id,
            detection.quality,
        )
        return self.get(employee_id)
