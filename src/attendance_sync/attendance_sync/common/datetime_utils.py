from __future__ import annotations

from datetime import date, datetime, time, timedelta


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def time_of_day(moment: datetime) -> time:
    """Time-of-day at whole-second resolution."""
    return moment.time().replace(microsecond=0)


def wall_clock_diff(later: time, earlier: time) -> timedelta:
    """Naive `later - earlier` on the same (arbitrary) day.

    No midnight handling: a negative span is returned as-is.
    """
    return datetime.combine(date.min, later) - datetime.combine(date.min, earlier)


def format_duration(value: timedelta) -> str:
    """Render a timedelta as HH:MM:SS (absolute value)."""
    total = abs(int(value.total_seconds()))
    return f"{total // 3600:02d}:{(total % 3600) // 60:02d}:{total % 60:02d}"


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def iter_months(start: date, end: date):
    """Yield (year, month) for every month touched by [start, end]."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1
