from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateCheckIn
from ..database.connection import DatabaseConnection
from ..database.mysql_base import UniqueViolation, db_cursor, fetchall, fetchone, from_db_utc, to_db_utc
from .model import AttendanceCounts, AttendanceRecord, CheckEvent
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, attendance_date,
    check_in_time, check_in_latitude, check_in_longitude, check_in_photo_url,
    check_in_face_verified, check_in_location_verified,
    check_out_time, check_out_latitude, check_out_longitude, check_out_photo_url,
    check_out_face_verified, check_out_location_verified,
    late_minutes, early_leave_minutes, work_duration_minutes, status, notes
"""


def _event(r: dict, prefix: str) -> Optional[CheckEvent]:
    at = r.get(f"{prefix}_time")
    if at is None:
        return None
    return CheckEvent(
        at=from_db_utc(at),
        latitude=float(r[f"{prefix}_latitude"]),
        longitude=float(r[f"{prefix}_longitude"]),
        photo_url=r.get(f"{prefix}_photo_url"),
        face_verified=bool(r.get(f"{prefix}_face_verified")),
        location_verified=bool(r.get(f"{prefix}_location_verified")),
    )


def _to_record(r: dict) -> AttendanceRecord:
    duration = r.get("work_duration_minutes")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        check_in=_event(r, "check_in"),
        check_out=_event(r, "check_out"),
        late_minutes=int(r.get("late_minutes") or 0),
        early_leave_minutes=int(r.get("early_leave_minutes") or 0),
        work_duration_minutes=int(duration) if duration is not None else None,
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances WHERE employee_id=%s AND attendance_date=%s",
                (int(employee_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE employee_id=%s
                ORDER BY attendance_date DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["attendance_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE {where}
                ORDER BY attendance_date DESC, employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_check_in(
        self,
        *,
        employee_id: int,
        attendance_date: date,
        check_in: CheckEvent,
        late_minutes: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances(
                        employee_id, attendance_date,
                        check_in_time, check_in_latitude, check_in_longitude, check_in_photo_url,
                        check_in_face_verified, check_in_location_verified,
                        late_minutes, status, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        attendance_date,
                        to_db_utc(check_in.at),
                        check_in.latitude,
                        check_in.longitude,
                        check_in.photo_url,
                        int(check_in.face_verified),
                        int(check_in.location_verified),
                        int(late_minutes),
                        status.value,
                        notes,
                    ),
                )
                return int(cur.lastrowid)
        except UniqueViolation:
            raise DuplicateCheckIn("Already checked in today")

    def record_check_in(
        self,
        *,
        attendance_id: int,
        check_in: CheckEvent,
        late_minutes: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET check_in_time=%s, check_in_latitude=%s, check_in_longitude=%s, check_in_photo_url=%s,
                    check_in_face_verified=%s, check_in_location_verified=%s,
                    late_minutes=%s, status=%s, notes=COALESCE(%s, notes)
                WHERE attendance_id=%s AND check_in_time IS NULL
                """,
                (
                    to_db_utc(check_in.at),
                    check_in.latitude,
                    check_in.longitude,
                    check_in.photo_url,
                    int(check_in.face_verified),
                    int(check_in.location_verified),
                    int(late_minutes),
                    status.value,
                    notes,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def record_check_out(
        self,
        *,
        attendance_id: int,
        check_out: CheckEvent,
        early_leave_minutes: int,
        work_duration_minutes: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET check_out_time=%s, check_out_latitude=%s, check_out_longitude=%s, check_out_photo_url=%s,
                    check_out_face_verified=%s, check_out_location_verified=%s,
                    early_leave_minutes=%s, work_duration_minutes=%s, status=%s, notes=COALESCE(%s, notes)
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    to_db_utc(check_out.at),
                    check_out.latitude,
                    check_out.longitude,
                    check_out.photo_url,
                    int(check_out.face_verified),
                    int(check_out.location_verified),
                    int(early_leave_minutes),
                    int(work_duration_minutes),
                    status.value,
                    notes,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def count_between(self, *, start_date: date, end_date: date) -> AttendanceCounts:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    COALESCE(SUM(check_in_time IS NOT NULL), 0) AS check_ins,
                    COALESCE(SUM(check_out_time IS NOT NULL), 0) AS check_outs,
                    COALESCE(SUM(check_in_time IS NOT NULL AND late_minutes > 0), 0) AS late,
                    COALESCE(SUM(check_in_time IS NOT NULL AND check_in_face_verified = 1), 0) AS face_verified,
                    COALESCE(SUM(check_in_time IS NOT NULL AND check_in_location_verified = 1), 0) AS location_verified
                FROM attendances
                WHERE attendance_date BETWEEN %s AND %s
                """,
                (start_date, end_date),
            )
            r = fetchone(cur) or {}
            return AttendanceCounts(
                check_ins=int(r.get("check_ins") or 0),
                check_outs=int(r.get("check_outs") or 0),
                late=int(r.get("late") or 0),
                face_verified=int(r.get("face_verified") or 0),
                location_verified=int(r.get("location_verified") or 0),
            )

    def list_check_in_times(self, *, start_date: date, end_date: date) -> Sequence[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT check_in_time
                FROM attendances
                WHERE attendance_date BETWEEN %s AND %s AND check_in_time IS NOT NULL
                ORDER BY check_in_time ASC
                """,
                (start_date, end_date),
            )
            return [from_db_utc(r["check_in_time"]) for r in fetchall(cur)]
