from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import LeaveRequestStatus
from .model import LeaveBalance, LeaveRequest, LeaveType


class LeaveRepository(Protocol):
    # Leave types
    def get_leave_type(self, leave_type_id: int) -> Optional[LeaveType]:
        raise NotImplementedError

    def list_leave_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        raise NotImplementedError

    # Balances
    def get_balance(self, *, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def list_balances(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    # Requests
    def get_request(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests_for_employee(
        self,
        *,
        employee_id: int,
        statuses: Iterable[LeaveRequestStatus],
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveRequestStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[LeaveRequest], int]:
        """Page of requests (newest first) and the total count for the filter."""

        raise NotImplementedError

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
        raise NotImplementedError

    def approve(
        self,
        *,
        request_id: int,
        decided_by: int,
        decided_at: datetime,
        balance: LeaveBalance,
        expected_used: int,
    ) -> None:
        """Mark the request approved and store ``balance`` in one transaction.

        Raises ``RequestAlreadyDecided`` if the request left PENDING meanwhile and
        ``ConcurrentUpdate`` if the stored ``used`` no longer equals ``expected_used``.
        """

        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveRequestStatus,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Move a PENDING request to ``status``; False if it was no longer PENDING."""

        raise NotImplementedError
