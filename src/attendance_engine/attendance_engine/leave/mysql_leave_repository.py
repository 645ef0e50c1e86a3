from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import LeaveRequestStatus
from ..core.exceptions import ConcurrentUpdate, RequestAlreadyDecided
from ..database.connection import DatabaseConnection
from ..database.mysql_base import UniqueViolation, db_cursor, fetchall, fetchone, from_db_utc, to_db_utc
from .model import LeaveBalance, LeaveRequest, LeaveType
from .repository import LeaveRepository

_REQUEST_COLUMNS = """
    request_id, employee_id, leave_type_id, start_date, end_date, total_days, reason,
    status, decided_by, decided_at, rejection_reason, created_at
"""


def _to_leave_type(r: dict) -> LeaveType:
    return LeaveType(
        leave_type_id=int(r["leave_type_id"]),
        name=r["name"],
        code=r["code"],
        description=r.get("description"),
        default_quota=int(r["default_quota"]),
        is_paid=bool(r.get("is_paid", True)),
        is_active=bool(r.get("is_active", True)),
    )


def _to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        leave_type_id=int(r["leave_type_id"]),
        year=int(r["year"]),
        quota=int(r["quota"]),
        used=int(r["used"]),
    )


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type_id=int(r["leave_type_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=int(r["total_days"]),
        reason=r.get("reason"),
        status=LeaveRequestStatus(r["status"]),
        decided_by=r.get("decided_by"),
        decided_at=from_db_utc(r.get("decided_at")),
        rejection_reason=r.get("rejection_reason"),
        created_at=from_db_utc(r["created_at"]),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Leave types --------
    def get_leave_type(self, leave_type_id: int) -> Optional[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_type_id, name, code, description, default_quota, is_paid, is_active
                FROM leave_types
                WHERE leave_type_id=%s
                """,
                (int(leave_type_id),),
            )
            r = fetchone(cur)
            return _to_leave_type(r) if r else None

    def list_leave_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT leave_type_id, name, code, description, default_quota, is_paid, is_active
                FROM leave_types
                {where}
                ORDER BY name ASC
                """
            )
            return [_to_leave_type(r) for r in fetchall(cur)]

    # -------- Balances --------
    def get_balance(self, *, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, employee_id, leave_type_id, year, quota, used
                FROM leave_balances
                WHERE employee_id=%s AND leave_type_id=%s AND year=%s
                """,
                (int(employee_id), int(leave_type_id), int(year)),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def list_balances(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, employee_id, leave_type_id, year, quota, used
                FROM leave_balances
                WHERE employee_id=%s AND year=%s
                ORDER BY leave_type_id ASC
                """,
                (int(employee_id), int(year)),
            )
            return [_to_balance(r) for r in fetchall(cur)]

    # -------- Requests --------
    def get_request(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests_for_employee(
        self,
        *,
        employee_id: int,
        statuses: Iterable[LeaveRequestStatus],
    ) -> Sequence[LeaveRequest]:
        values = [s.value for s in statuses]
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM leave_requests
                WHERE employee_id=%s AND status IN ({placeholders})
                ORDER BY start_date ASC
                """,
                tuple([int(employee_id)] + values),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveRequestStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[LeaveRequest], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM leave_requests WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_request(r) for r in fetchall(cur)], total

    def create_request(
        self,
        *,
        employee_id: int,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        total_days: int,
        reason: Optional[str],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type_id, start_date, end_date, total_days, reason, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    int(leave_type_id),
                    start_date,
                    end_date,
                    int(total_days),
                    reason,
                    LeaveRequestStatus.PENDING.value,
                    to_db_utc(created_at),
                ),
            )
            return int(cur.lastrowid)

    def approve(
        self,
        *,
        request_id: int,
        decided_by: int,
        decided_at: datetime,
        balance: LeaveBalance,
        expected_used: int,
    ) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE leave_requests
                    SET status=%s, decided_by=%s, decided_at=%s
                    WHERE request_id=%s AND status=%s
                    """,
                    (
                        LeaveRequestStatus.APPROVED.value,
                        int(decided_by),
                        to_db_utc(decided_at),
                        int(request_id),
                        LeaveRequestStatus.PENDING.value,
                    ),
                )
                if cur.rowcount == 0:
                    raise RequestAlreadyDecided("Can only approve pending requests")

                if balance.balance_id is None:
                    cur.execute(
                        """
                        INSERT INTO leave_balances(employee_id, leave_type_id, year, quota, used)
                        VALUES(%s,%s,%s,%s,%s)
                        """,
                        (
                            int(balance.employee_id),
                            int(balance.leave_type_id),
                            int(balance.year),
                            int(balance.quota),
                            int(balance.used),
                        ),
                    )
                else:
                    cur.execute(
                        """
                        UPDATE leave_balances
                        SET used=%s
                        WHERE balance_id=%s AND used=%s
                        """,
                        (int(balance.used), int(balance.balance_id), int(expected_used)),
                    )
                    if cur.rowcount == 0:
                        raise ConcurrentUpdate("Leave balance changed concurrently; retry the approval")
        except UniqueViolation:
            raise ConcurrentUpdate("Leave balance changed concurrently; retry the approval")

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveRequestStatus,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    to_db_utc(decided_at),
                    rejection_reason,
                    int(request_id),
                    LeaveRequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
