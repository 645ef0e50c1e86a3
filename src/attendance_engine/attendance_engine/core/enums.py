from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor role supplied by the identity service."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Day status stored on an attendance record."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    LEAVE = "leave"
    HALF_DAY = "half_day"


class LeaveRequestStatus(str, Enum):
    """Leave request workflow. APPROVED, REJECTED and CANCELLED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class CheckKind(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
