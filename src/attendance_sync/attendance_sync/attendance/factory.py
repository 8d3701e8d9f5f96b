from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..employees.model import Schedule
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.overtime_strategy import OvertimeStrategy


def _on_any_day(value: time) -> datetime:
    # Naive time-of-day comparison; no midnight crossing.
    return datetime.combine(date.min, value)


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    grace_minutes: int = 0

    def for_checkin(self, *, punch: time, schedule: Optional[Schedule]) -> AttendanceStrategy:
        if not schedule:
            return NormalStrategy()

        allowed = _on_any_day(schedule.time_in) + timedelta(minutes=self.grace_minutes)
        if _on_any_day(punch) > allowed:
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, punch: time, schedule: Optional[Schedule]) -> AttendanceStrategy:
        if not schedule:
            return NormalStrategy()

        if punch >= schedule.time_out:
            return OvertimeStrategy()
        return EarlyLeaveStrategy()
