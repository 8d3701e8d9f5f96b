from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import Disposition, PunchDirection, SyncOutcome
from ..sources.model import RawEvent


@dataclass(frozen=True)
class EventGroup:
    """All punches of one employee on one calendar day, ascending by time."""

    employee_code: str
    work_date: date
    events: tuple[RawEvent, ...]

    def __post_init__(self):
        if not self.events:
            raise ValueError("EventGroup needs at least one event")

    @property
    def key(self) -> tuple[str, date]:
        return (self.employee_code, self.work_date)

    @property
    def event_ids(self) -> list[Any]:
        return [e.source_event_id for e in self.events if e.source_event_id is not None]

    @property
    def employee_name(self) -> Optional[str]:
        return next((e.employee_name for e in self.events if e.employee_name), None)

    @property
    def legacy_id(self) -> Optional[int]:
        return next((e.legacy_id for e in self.events if e.legacy_id is not None), None)

    @property
    def first_timestamp(self) -> datetime:
        return min(e.timestamp for e in self.events)

    @property
    def last_timestamp(self) -> datetime:
        return max(e.timestamp for e in self.events)


@dataclass
class GroupResult:
    check_ins: int = 0
    check_outs: int = 0
    skipped: int = 0
    employee_not_found: bool = False
    employee_created: bool = False
    has_explicit_in: bool = False
    has_explicit_out: bool = False

    @property
    def disposition(self) -> Disposition:
        if self.employee_not_found:
            return Disposition.EMPLOYEE_NOT_FOUND
        if self.check_ins or self.check_outs:
            return Disposition.CREATED
        return Disposition.SKIPPED

    def note_directions(self, events) -> None:
        for e in events:
            if e.direction is PunchDirection.IN:
                self.has_explicit_in = True
            elif e.direction is PunchDirection.OUT:
                self.has_explicit_out = True


@dataclass
class SyncStats:
    fetched: int = 0
    check_ins: int = 0
    check_outs: int = 0
    skipped: int = 0
    errors: int = 0
    employees_not_found: int = 0
    employees_created: int = 0

    def add(self, result: GroupResult) -> None:
        self.check_ins += result.check_ins
        self.check_outs += result.check_outs
        self.skipped += result.skipped
        if result.employee_not_found:
            self.employees_not_found += 1
        if result.employee_created:
            self.employees_created += 1

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class SyncResult:
    """Outcome of one sync run: OK | CONNECTIVITY_FAILED | PARTIAL_WITH_ERRORS."""

    source: str
    outcome: SyncOutcome
    stats: SyncStats = field(default_factory=SyncStats)
    since: Optional[datetime] = None
    watermark: Optional[datetime] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is SyncOutcome.OK

    def summary(self) -> str:
        if self.outcome is SyncOutcome.CONNECTIVITY_FAILED:
            return f"{self.source}: {self.message or 'Connection failed'}"
        s = self.stats
        text = f"{self.source}: {s.fetched} fetched, {s.check_ins} check-ins, {s.check_outs} check-outs"
        if s.skipped:
            text += f", {s.skipped} skipped"
        if s.employees_not_found:
            text += f", {s.employees_not_found} unknown employees"
        if s.errors:
            text += f", {s.errors} errors"
        return text

    def as_dict(self) -> dict:
        return {
            "source": self.source,
            "outcome": self.outcome.value,
            "stats": self.stats.as_dict(),
            "since": self.since.isoformat() if self.since else None,
            "watermark": self.watermark.isoformat() if self.watermark else None,
            "message": self.message,
        }
