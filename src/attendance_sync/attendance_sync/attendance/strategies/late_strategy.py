from __future__ import annotations

from datetime import time
from typing import Optional

from ...common.datetime_utils import wall_clock_diff
from ...core.enums import RecordStatus
from ...employees.model import Schedule
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in; late time is measured from schedule.time_in (grace not deducted)."""

    def decide_checkin(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.LATE, side_duration=wall_clock_diff(punch, schedule.time_in))

    def decide_checkout(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.ON_TIME)
