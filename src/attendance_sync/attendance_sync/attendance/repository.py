from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import RecordKind
from .model import AttendanceRecord, LateTime, LeaveRecord, Overtime


class AttendanceRepository(Protocol):
    """Persistence for attendance (check-in) and leave (check-out) rows plus
    their late / overtime side records.

    Inserts into attendances/leaves raise WriteConflict when the storage
    unique key rejects a duplicate.
    """

    def exists(self, *, employee_id: int, work_date: date, kind: RecordKind) -> bool:
        raise NotImplementedError

    def insert_attendance(self, record: AttendanceRecord, *, late: Optional[LateTime] = None) -> int:
        """Insert the check-in and, in the same transaction, its LateTime."""
        raise NotImplementedError

    def insert_leave(self, record: LeaveRecord, *, overtime: Optional[Overtime] = None) -> int:
        """Insert the check-out and, in the same transaction, its Overtime."""
        raise NotImplementedError

    def last_recorded_at(self) -> dict[str, Optional[datetime]]:
        """Newest created_at of attendances and leaves (for status pages)."""

        raise NotImplementedError
