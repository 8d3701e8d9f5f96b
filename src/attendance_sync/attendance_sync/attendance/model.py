from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import ClassVar

from ..core.enums import RecordKind, RecordStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Bản ghi vào ca (check-in). Duy nhất theo (employee_id, work_date, kind)."""

    kind: ClassVar[RecordKind] = RecordKind.CHECK_IN

    employee_id: int
    work_date: date
    punch_time: time
    status: RecordStatus = RecordStatus.ON_TIME

    @property
    def key(self) -> tuple[int, date, RecordKind]:
        return (self.employee_id, self.work_date, self.kind)


@dataclass(frozen=True)
class LeaveRecord:
    """Bản ghi tan ca (check-out). Duy nhất theo (employee_id, work_date, kind)."""

    kind: ClassVar[RecordKind] = RecordKind.CHECK_OUT

    employee_id: int
    work_date: date
    punch_time: time
    status: RecordStatus = RecordStatus.ON_TIME

    @property
    def key(self) -> tuple[int, date, RecordKind]:
        return (self.employee_id, self.work_date, self.kind)


@dataclass(frozen=True)
class LateTime:
    employee_id: int
    work_date: date
    duration: timedelta


@dataclass(frozen=True)
class Overtime:
    employee_id: int
    work_date: date
    duration: timedelta
