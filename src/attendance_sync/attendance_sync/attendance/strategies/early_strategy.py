from __future__ import annotations

from datetime import time
from typing import Optional

from ...core.enums import RecordStatus
from ...employees.model import Schedule
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Check-out before schedule.time_out."""

    def decide_checkin(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.ON_TIME)

    def decide_checkout(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.EARLY_LEAVE)
