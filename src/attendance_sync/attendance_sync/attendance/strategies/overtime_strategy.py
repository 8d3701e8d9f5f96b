from __future__ import annotations

from datetime import time
from typing import Optional

from ...common.datetime_utils import wall_clock_diff
from ...core.enums import RecordStatus
from ...employees.model import Schedule
from .base import AttendanceStrategy, StatusDecision


class OvertimeStrategy(AttendanceStrategy):
    """Check-out at or after schedule.time_out: on time, overtime = punch - time_out."""

    def decide_checkin(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.ON_TIME)

    def decide_checkout(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        return StatusDecision(status=RecordStatus.ON_TIME, side_duration=wall_clock_diff(punch, schedule.time_out))
