from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, Optional

from ..core.enums import LeaveRequestStatus
from ..core.exceptions import InsufficientBalance, ValidationError
from .model import LeaveBalance, LeaveRequest, LeaveType

# Requests that still hold their dates.
BLOCKING_STATUSES = frozenset({LeaveRequestStatus.PENDING, LeaveRequestStatus.APPROVED})


def inclusive_days(start_date: date, end_date: date) -> int:
    if end_date < start_date:
        raise ValidationError("end_date cannot be before start_date")
    return (end_date - start_date).days + 1


class LeaveBalanceLedger:
    """Leave-balance arithmetic over already-fetched rows.

    ``used`` only grows, and only through ``debit`` (called when a request is
    approved). Persistence and row locking belong to the repository.
    """

    def get_or_init(
        self,
        existing: Optional[LeaveBalance],
        *,
        employee_id: int,
        leave_type: LeaveType,
        year: int,
    ) -> LeaveBalance:
        if existing is not None:
            return existing
        return LeaveBalance(
            employee_id=int(employee_id),
            leave_type_id=leave_type.leave_type_id,
            year=int(year),
            quota=int(leave_type.default_quota),
            used=0,
        )

    def check_availability(self, balance: LeaveBalance, requested_days: int) -> bool:
        return balance.remaining >= requested_days

    def debit(self, balance: LeaveBalance, days: int) -> LeaveBalance:
        if days <= 0:
            raise ValidationError("Debited days must be positive")
        if not self.check_availability(balance, days):
            raise InsufficientBalance(remaining=balance.remaining, needed=days)
        return replace(balance, used=balance.used + days)

    def has_overlap(self, existing_requests: Iterable[LeaveRequest], start_date: date, end_date: date) -> bool:
        return any(
            r.status in BLOCKING_STATUSES and r.start_date <= end_date and r.end_date >= start_date
            for r in existing_requests
        )
