from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import PunchDirection


@dataclass(frozen=True)
class RawEvent:
    """One punch read from an external source. Immutable."""

    employee_code: str
    timestamp: datetime
    direction: PunchDirection = PunchDirection.UNKNOWN
    source_event_id: Any = None

    # Optional metadata used for employee lookup / auto-create.
    employee_name: Optional[str] = None
    legacy_id: Optional[int] = None
    device: Optional[str] = None
    department: Optional[str] = None
