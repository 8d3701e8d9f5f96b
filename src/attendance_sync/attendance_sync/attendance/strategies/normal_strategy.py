from __future__ import annotations

from datetime import time
from typing import Optional

from ...core.enums import RecordStatus
from ...employees.model import Schedule
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in, normal check-out (also used when there is no schedule)."""

    def decide_checkin(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.ON_TIME)

    def decide_checkout(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.ON_TIME)
