from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceCounts, AttendanceRecord, CheckEvent


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

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
        """Insert today's record.

        Must raise ``DuplicateCheckIn`` when ``(employee_id, attendance_date)`` already exists.
        """

        raise NotImplementedError

    def record_check_in(
        self,
        *,
        attendance_id: int,
        check_in: CheckEvent,
        late_minutes: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        """Fill the check-in of an existing row that has none yet (e.g. a pre-created row)."""

        raise NotImplementedError

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
        """Set the check-out only if none is recorded yet; False when it lost that race."""

        raise NotImplementedError

    def count_between(self, *, start_date: date, end_date: date) -> AttendanceCounts:
        raise NotImplementedError

    def list_check_in_times(self, *, start_date: date, end_date: date) -> Sequence[datetime]:
        """Check-in instants (aware, UTC) of the rows dated in the range."""

        raise NotImplementedError
