from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee

UNASSIGNED_DEPARTMENT = "Unassigned"


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this protocol, not on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def list(self, *, active: Optional[bool] = None) -> Sequence[Employee]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        email: str,
        role: Role,
        phone: Optional[str],
        department: Optional[str],
        position: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_profile(
        self,
        *,
        employee_id: int,
        name: str,
        email: str,
        role: Role,
        phone: Optional[str],
        department: Optional[str],
        position: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def set_active(self, employee_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def set_face(self, *, employee_id: int, face_token: str, face_image_url: Optional[str], enrolled_at: datetime) -> bool:
        raise NotImplementedError

    def count_by_department(self, *, active: bool = True) -> dict[str, int]:
        """Headcount per department; employees without one count as ``UNASSIGNED_DEPARTMENT``."""

        raise NotImplementedError
