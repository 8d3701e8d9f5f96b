from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

from ..sources.model import RawEvent
from .model import EventGroup


def group_events(events: Iterable[RawEvent]) -> dict[tuple[str, date], EventGroup]:
    """Group punches by (employee_code, calendar date of the timestamp).

    Dates are taken from the source's naive local timestamps. The returned
    dict iterates in key order; each group's events are ascending by time.
    """
    buckets: dict[tuple[str, date], list[RawEvent]] = defaultdict(list)
    for event in events:
        buckets[(event.employee_code, event.timestamp.date())].append(event)

    return {
        key: EventGroup(
            employee_code=key[0],
            work_date=key[1],
            events=tuple(sorted(buckets[key], key=lambda e: e.timestamp)),
        )
        for key in sorted(buckets)
    }
