from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class CheckEvent:
    """One side (check-in or check-out) of a day's attendance."""

    at: datetime
    latitude: float
    longitude: float
    photo_url: Optional[str]
    face_verified: bool
    location_verified: bool


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one row per employee per attendance date."""

    attendance_id: int
    employee_id: int
    attendance_date: date
    status: AttendanceStatus
    check_in: Optional[CheckEvent] = None
    check_out: Optional[CheckEvent] = None
    late_minutes: int = 0
    early_leave_minutes: int = 0
    work_duration_minutes: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model for the admin report over a date range."""

    start_date: date
    end_date: date
    total_records: int
    present: int
    late: int
    absent: int
    leave: int
    half_day: int
    total_late_minutes: int
    total_early_leave_minutes: int


@dataclass(frozen=True)
class AttendanceCounts:
    """Aggregate over the attendance rows of a date range."""

    check_ins: int = 0
    check_outs: int = 0
    late: int = 0
    face_verified: int = 0
    location_verified: int = 0


@dataclass(frozen=True)
class AttendanceAnalytics:
    """Admin dashboard overview for a period ending today."""

    period: str
    start_date: date
    end_date: date
    total_employees: int
    check_ins: int
    check_outs: int
    attendance_rate: float
    average_check_in_time: Optional[str]
    late_check_ins: int
    face_verified: int
    face_verification_rate: float
    location_verified: int
    location_verification_rate: float
    departments: dict[str, int] = field(default_factory=dict)
    check_ins_by_hour: dict[int, int] = field(default_factory=dict)
