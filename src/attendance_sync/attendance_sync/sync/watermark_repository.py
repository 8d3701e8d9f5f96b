from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol


class WatermarkRepository(Protocol):
    """Last-synced event timestamp per source."""

    def get(self, source: str) -> Optional[datetime]:
        raise NotImplementedError

    def advance(self, source: str, last_event_at: datetime) -> None:
        """Move the watermark forward; an older value never overwrites a newer one."""

        raise NotImplementedError
