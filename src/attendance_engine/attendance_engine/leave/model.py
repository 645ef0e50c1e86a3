from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveRequestStatus


@dataclass(frozen=True)
class LeaveType:
    """Catalog entry; reference data during normal operation."""

    leave_type_id: int
    name: str
    code: str
    default_quota: int
    is_paid: bool = True
    is_active: bool = True
    description: Optional[str] = None


@dataclass(frozen=True)
class LeaveBalance:
    """Quota/used days for one employee, leave type and year.

    ``balance_id`` is None while the balance only exists in memory (seeded from the
    leave type's default quota and not persisted yet).
    """

    employee_id: int
    leave_type_id: int
    year: int
    quota: int
    used: int
    balance_id: Optional[int] = None

    @property
    def remaining(self) -> int:
        return self.quota - self.used

    @property
    def is_persisted(self) -> bool:
        return self.balance_id is not None


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    total_days: int
    status: LeaveRequestStatus
    created_at: datetime
    reason: Optional[str] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
