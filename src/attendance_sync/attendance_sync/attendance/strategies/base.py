from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time, timedelta
from typing import Optional

from ...core.enums import RecordStatus
from ...employees.model import Schedule


@dataclass(frozen=True)
class StatusDecision:
    """Status for the primary record plus the side-record duration, if any."""

    status: RecordStatus
    side_duration: Optional[timedelta] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_checkin(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, punch: time, schedule: Optional[Schedule]) -> StatusDecision:
        raise NotImplementedError
