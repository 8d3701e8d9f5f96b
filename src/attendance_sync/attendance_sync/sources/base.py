from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence

from .model import RawEvent


class SourceAdapter(ABC):
    """Reads raw punch events from one external store.

    Contract:
    - test_connection() never raises.
    - fetch_events() returns events strictly after `since` (or after the
      adapter's default lookback when `since` is None) and at/before `until`,
      ascending by timestamp. Query errors yield []; failing to connect
      raises ConnectivityError.
    """

    name: str = "source"
    supports_mark_processed: bool = False

    @abstractmethod
    def test_connection(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def fetch_events(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[RawEvent]:
        raise NotImplementedError

    def mark_processed(self, event_ids: Sequence[Any]) -> int:
        return 0

    def get_stats(self) -> dict:
        return {}
