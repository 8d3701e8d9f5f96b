from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Hashable, Optional, Union

from ..core.enums import WriteResult
from ..core.exceptions import WriteConflict
from .model import AttendanceRecord, LateTime, LeaveRecord, Overtime
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

KeyedRecord = Union[AttendanceRecord, LeaveRecord]
SideRecord = Union[LateTime, Overtime]


class _Slot:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLock:
    """One lock per key, alive only while somebody holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._slots: dict[Hashable, _Slot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            slot = self._slots.setdefault(key, _Slot())
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0:
                    del self._slots[key]


class IdempotentWriter:
    """Check-then-insert for check-in / check-out rows.

    The keyed lock only serializes writers inside this process; the unique
    index on the target tables is what keeps concurrent runs from
    double-inserting, and its rejection is reported as SKIPPED.

    A LateTime / Overtime side record is stored in the same transaction as
    its parent row, so either both exist or neither does.
    """

    def __init__(self, repository: AttendanceRepository):
        self._repo = repository
        self._locks = KeyedLock()

    @property
    def locks(self) -> KeyedLock:
        return self._locks

    def write(self, record: KeyedRecord, side: Optional[SideRecord] = None) -> WriteResult:
        with self._locks.hold(record.key):
            if self._repo.exists(employee_id=record.employee_id, work_date=record.work_date, kind=record.kind):
                return WriteResult.SKIPPED

            try:
                if isinstance(record, AttendanceRecord):
                    self._repo.insert_attendance(record, late=side)
                else:
                    self._repo.insert_leave(record, overtime=side)
            except WriteConflict:
                logger.info("Duplicate %s for employee %s on %s, skipped", record.kind.name, record.employee_id, record.work_date)
                return WriteResult.SKIPPED

            return WriteResult.CREATED
