from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import UniqueViolation, db_cursor, fetchall, fetchone, from_db_utc, to_db_utc
from .model import Employee
from .repository import UNASSIGNED_DEPARTMENT, EmployeeRepository

_COLUMNS = """
    employee_id, name, email, phone, department, position, role, is_active,
    face_token, face_image_url, face_enrolled_at, created_at
"""


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        name=row["name"],
        email=row["email"],
        phone=row.get("phone"),
        department=row.get("department"),
        position=row.get("position"),
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
        face_token=row.get("face_token"),
        face_image_url=row.get("face_image_url"),
        face_enrolled_at=from_db_utc(row.get("face_enrolled_at")),
        created_at=from_db_utc(row.get("created_at")),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list(self, *, active: Optional[bool] = None) -> Sequence[Employee]:
        clauses = ["1=1"]
        params: list[object] = []
        if active is not None:
            clauses.append("is_active=%s")
            params.append(1 if active else 0)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {' AND '.join(clauses)} ORDER BY name ASC",
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employees(name, email, phone, department, position, role, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (name, email, phone, department, position, role.value),
                )
                return int(cur.lastrowid)
        except UniqueViolation:
            raise ValidationError("Email is already registered")

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE employees
                    SET name=%s, email=%s, phone=%s, department=%s, position=%s, role=%s
                    WHERE employee_id=%s
                    """,
                    (name, email, phone, department, position, role.value, int(employee_id)),
                )
                return cur.rowcount > 0
        except UniqueViolation:
            raise ValidationError("Email is already registered")

    def set_active(self, employee_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET is_active=%s WHERE employee_id=%s",
                (1 if is_active else 0, int(employee_id)),
            )
            return cur.rowcount > 0

    def set_face(self, *, employee_id: int, face_token: str, face_image_url: Optional[str], enrolled_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET face_token=%s, face_image_url=%s, face_enrolled_at=%s
                WHERE employee_id=%s
                """,
                (face_token, face_image_url, to_db_utc(enrolled_at), int(employee_id)),
            )
            return cur.rowcount > 0

    def count_by_department(self, *, active: bool = True) -> dict[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(NULLIF(TRIM(department), ''), %s) AS department, COUNT(*) AS total
                FROM employees
                WHERE is_active=%s
                GROUP BY 1
                ORDER BY 1 ASC
                """,
                (UNASSIGNED_DEPARTMENT, 1 if active else 0),
            )
            return {r["department"]: int(r["total"]) for r in fetchall(cur)}
