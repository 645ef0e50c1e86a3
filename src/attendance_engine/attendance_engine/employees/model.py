from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: Plain data object (no DB access). ``face_token`` is the opaque reference
    returned by the face-recognition service at enrollment.
    """

    employee_id: int
    name: str
    email: str
    role: Role
    is_active: bool = True
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    face_token: Optional[str] = None
    face_image_url: Optional[str] = None
    face_enrolled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_face_enrolled(self) -> bool:
        return bool(self.face_token)
