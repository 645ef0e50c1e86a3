from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from ..common.actor import Actor
from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty, require_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import LeaveRequestStatus
from ..core.exceptions import (
    AuthorizationError,
    EmployeeInactive,
    InsufficientBalance,
    NotFoundError,
    OverlappingLeave,
    RequestAlreadyDecided,
    ValidationError,
)
from ..employees.repository import EmployeeRepository
from .ledger import BLOCKING_STATUSES, LeaveBalanceLedger, inclusive_days
from .model import LeaveBalance, LeaveRequest, LeaveType
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveRequestPage:
    items: Sequence[LeaveRequest]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.total > self.page * self.limit


class LeaveService:
    """Use case: leave submission, admin decisions and balance reporting."""

    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        *,
        ledger: Optional[LeaveBalanceLedger] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._leaves = leaves
        self._employees = employees
        self._ledger = ledger or LeaveBalanceLedger()
        self._clock = clock

    def _get_leave_type(self, leave_type_id: int) -> LeaveType:
        leave_type = self._leaves.get_leave_type(int(leave_type_id))
        if not leave_type:
            raise NotFoundError("Leave type not found")
        return leave_type

    def _get_request(self, request_id: int) -> LeaveRequest:
        req = self._leaves.get_request(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    def _balance_for(self, *, employee_id: int, leave_type: LeaveType, year: int) -> LeaveBalance:
        existing = self._leaves.get_balance(employee_id=employee_id, leave_type_id=leave_type.leave_type_id, year=year)
        return self._ledger.get_or_init(existing, employee_id=employee_id, leave_type=leave_type, year=year)

    def submit(
        self,
        *,
        actor: Actor,
        employee_id: Any,
        leave_type_id: Any,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        employee_id = require_positive_int(employee_id, "employee_id")
        leave_type_id = require_positive_int(leave_type_id, "leave_type_id")
        if not actor.is_admin and actor.employee_id != employee_id:
            raise AuthorizationError("You can only request leave for yourself")

        total_days = inclusive_days(start_date, end_date)

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if not employee.is_active:
            raise EmployeeInactive("Employee account is deactivated")

        leave_type = self._get_leave_type(leave_type_id)
        if not leave_type.is_active:
            raise ValidationError("Leave type is not available")

        # Balances are tracked per year of the first leave day.
        balance = self._balance_for(employee_id=employee_id, leave_type=leave_type, year=start_date.year)
        if not self._ledger.check_availability(balance, total_days):
            raise InsufficientBalance(remaining=balance.remaining, needed=total_days)

        active = self._leaves.list_requests_for_employee(employee_id=employee_id, statuses=BLOCKING_STATUSES)
        if self._ledger.has_overlap(active, start_date, end_date):
            raise OverlappingLeave("A leave request already exists for the same period")

        request_id = self._leaves.create_request(
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=(reason or "").strip() or None,
            created_at=self._clock(),
        )
        logger.info(
            "leave request %s submitted: employee=%s type=%s %s..%s (%s days)",
            request_id,
            employee_id,
            leave_type.code,
            start_date,
            end_date,
            total_days,
        )
        return self._get_request(request_id)

    def approve(self, *, actor: Actor, request_id: int) -> LeaveRequest:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can approve leave requests")

        req = self._get_request(request_id)
        if req.status != LeaveRequestStatus.PENDING:
            raise RequestAlreadyDecided("Can only approve pending requests")

        leave_type = self._get_leave_type(req.leave_type_id)
        balance = self._balance_for(employee_id=req.employee_id, leave_type=leave_type, year=req.start_date.year)
        debited = self._ledger.debit(balance, req.total_days)

        self._leaves.approve(
            request_id=req.request_id,
            decided_by=actor.employee_id,
            decided_at=self._clock(),
            balance=debited,
            expected_used=balance.used,
        )
        logger.info(
            "leave request %s approved by %s; balance employee=%s type=%s year=%s used %s -> %s",
            req.request_id,
            actor.employee_id,
            req.employee_id,
            leave_type.code,
            debited.year,
            balance.used,
            debited.used,
        )
        return self._get_request(req.request_id)

    def reject(self, *, actor: Actor, request_id: int, reason: Optional[str]) -> LeaveRequest:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can reject leave requests")
        reason = require_non_empty(reason, "reason")

        req = self._get_request(request_id)
        if req.status != LeaveRequestStatus.PENDING:
            raise RequestAlreadyDecided("Can only reject pending requests")

        if not self._leaves.decide(
            request_id=req.request_id,
            status=LeaveRequestStatus.REJECTED,
            decided_by=actor.employee_id,
            decided_at=self._clock(),
            rejection_reason=reason,
        ):
            raise RequestAlreadyDecided("Can only reject pending requests")
        logger.info("leave request %s rejected by %s", req.request_id, actor.employee_id)
        return self._get_request(req.request_id)

    def cancel(self, *, actor: Actor, request_id: int) -> LeaveRequest:
        """Withdraw a pending request. Approved leave cannot be cancelled, so ``used`` is never reversed."""
        req = self._get_request(request_id)
        if req.employee_id != actor.employee_id and not actor.is_admin:
            raise AuthorizationError("You can only cancel your own leave requests")
        if req.status != LeaveRequestStatus.PENDING:
            raise RequestAlreadyDecided("Can only cancel pending requests")

        if not self._leaves.decide(
            request_id=req.request_id,
            status=LeaveRequestStatus.CANCELLED,
            decided_by=actor.employee_id,
            decided_at=self._clock(),
        ):
            raise RequestAlreadyDecided("Can only cancel pending requests")
        logger.info("leave request %s cancelled by %s", req.request_id, actor.employee_id)
        return self._get_request(req.request_id)

    def get(self, *, actor: Actor, request_id: int) -> LeaveRequest:
        req = self._get_request(request_id)
        if req.employee_id != actor.employee_id and not actor.is_admin:
            raise AuthorizationError("You can only view your own leave requests")
        return req

    def list_requests(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        status: Optional[LeaveRequestStatus] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> LeaveRequestPage:
        if not actor.is_admin:
            if employee_id is not None and employee_id != actor.employee_id:
                raise AuthorizationError("You can only view your own leave requests")
            employee_id = actor.employee_id
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        limit = min(limit, MAX_PAGE_SIZE)

        items, total = self._leaves.list_requests(
            employee_id=employee_id,
            status=status,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return LeaveRequestPage(items=items, total=total, page=page, limit=limit)

    def get_balances(self, *, actor: Actor, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        """Stored balances plus unpersisted ones for active leave types without a row yet."""
        if not actor.is_admin and actor.employee_id != int(employee_id):
            raise AuthorizationError("You can only view your own leave balance")

        stored = {b.leave_type_id: b for b in self._leaves.list_balances(employee_id=int(employee_id), year=int(year))}
        out = list(stored.values())
        for leave_type in self._leaves.list_leave_types(active_only=True):
            if leave_type.leave_type_id not in stored:
                out.append(
                    self._ledger.get_or_init(None, employee_id=int(employee_id), leave_type=leave_type, year=int(year))
                )
        return sorted(out, key=lambda b: b.leave_type_id)

    def list_leave_types(self) -> Sequence[LeaveType]:
        return self._leaves.list_leave_types(active_only=True)
