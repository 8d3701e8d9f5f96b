from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import start_of_day
from ..core.enums import SyncOutcome
from ..core.exceptions import ConnectivityError, GroupProcessingError
from ..sources.base import SourceAdapter
from ..sources.model import RawEvent
from .grouper import group_events
from .model import EventGroup, SyncResult, SyncStats
from .resolver import PunchResolver
from .watermark_repository import WatermarkRepository

logger = logging.getLogger(__name__)


class SyncService:
    """fetch -> group -> resolve -> write for one source.

    `sync()` never raises: connectivity problems come back as
    CONNECTIVITY_FAILED (before anything is written) and per-group failures
    are counted in `stats.errors` while the remaining groups are processed.
    """

    def __init__(
        self,
        adapter: SourceAdapter,
        resolver: PunchResolver,
        watermarks: WatermarkRepository | None = None,
        *,
        mark_processed: bool = False,
        max_workers: int = 1,
    ):
        self._adapter = adapter
        self._resolver = resolver
        self._watermarks = watermarks
        self._mark_processed = bool(mark_processed) and adapter.supports_mark_processed
        self._max_workers = max(1, int(max_workers))

    @property
    def source(self) -> str:
        return self._adapter.name

    @property
    def adapter(self) -> SourceAdapter:
        return self._adapter

    def test_connection(self) -> bool:
        return self._adapter.test_connection()

    def last_watermark(self) -> Optional[datetime]:
        if self._watermarks is None:
            return None
        try:
            return self._watermarks.get(self.source)
        except Exception:
            logger.error("Cannot read sync watermark for %s", self.source, exc_info=True)
            return None

    def effective_since(self, since: Optional[datetime] = None, *, full: bool = False) -> Optional[datetime]:
        """Explicit `since` > stored watermark > None (adapter default lookback).

        A stored watermark is rewound to the start of its day so the whole
        day is regrouped; already written rows are skipped by the writer.
        """
        if since is not None:
            return since
        if full:
            return None
        watermark = self.last_watermark()
        if watermark is None:
            return None
        return start_of_day(watermark) - timedelta(microseconds=1)

    def sync(self, since: Optional[datetime] = None, *, full: bool = False) -> SyncResult:
        try:
            return self._run(since, full=full)
        except Exception as exc:
            logger.error("Sync of %s aborted", self.source, exc_info=True)
            return SyncResult(
                source=self.source,
                outcome=SyncOutcome.PARTIAL_WITH_ERRORS,
                stats=SyncStats(errors=1),
                since=since,
                message=str(exc),
            )

    def _run(self, since: Optional[datetime], *, full: bool) -> SyncResult:
        effective = self.effective_since(since, full=full)

        if not self._adapter.test_connection():
            return self._connectivity_failed(effective, "Connection failed")

        try:
            events = self._adapter.fetch_events(since=effective)
        except ConnectivityError as exc:
            logger.error("Fetch from %s failed: %s", self.source, exc)
            return self._connectivity_failed(effective, str(exc))

        stats = SyncStats(fetched=len(events))
        groups = group_events(events)
        failed = self._process(list(groups.values()), stats)
        watermark = self._advance_watermark(events, failed)

        result = SyncResult(
            source=self.source,
            outcome=SyncOutcome.PARTIAL_WITH_ERRORS if stats.errors else SyncOutcome.OK,
            stats=stats,
            since=effective,
            watermark=watermark,
        )
        logger.info("Sync completed: %s", result.summary())
        return result

    def _connectivity_failed(self, since: Optional[datetime], message: str) -> SyncResult:
        logger.error("Cannot connect to %s source", self.source)
        return SyncResult(source=self.source, outcome=SyncOutcome.CONNECTIVITY_FAILED, since=since, message=message)

    def _process(self, groups: Sequence[EventGroup], stats: SyncStats) -> list[EventGroup]:
        lock = threading.Lock()
        failed: list[EventGroup] = []

        def handle(group: EventGroup) -> None:
            try:
                result = self._resolver.resolve(group)
            except Exception as exc:
                error = GroupProcessingError(group.employee_code, group.work_date, exc)
                logger.error("Error processing punch group %s", error, exc_info=True)
                with lock:
                    stats.errors += 1
                    failed.append(group)
                return

            with lock:
                stats.add(result)

            # Unknown employees stay unprocessed so a later run can pick them up.
            if self._mark_processed and not result.employee_not_found:
                self._adapter.mark_processed(group.event_ids)

        if self._max_workers == 1 or len(groups) < 2:
            for group in groups:
                handle(group)
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                list(pool.map(handle, groups))

        return failed

    def _advance_watermark(self, events: Iterable[RawEvent], failed: Sequence[EventGroup]) -> Optional[datetime]:
        """Newest event timestamp older than the first punch of any failed group."""
        if self._watermarks is None:
            return None

        cutoff = min((g.first_timestamp for g in failed), default=None)
        candidates = [e.timestamp for e in events if cutoff is None or e.timestamp < cutoff]
        if not candidates:
            return None

        watermark = max(candidates)
        try:
            self._watermarks.advance(self.source, watermark)
        except Exception:
            logger.error("Cannot store sync watermark for %s", self.source, exc_info=True)
            return None
        return watermark
