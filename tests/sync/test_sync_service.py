from __future__ import annotations

from datetime import date, datetime, time, timedelta

from src.attendance_sync.attendance_sync.core.enums import RecordKind, RecordStatus, SyncOutcome
from src.attendance_sync.attendance_sync.core.exceptions import ConnectivityError
from src.attendance_sync.attendance_sync.sync.service import SyncService
from tests.fakes import FakeAdapter, InMemoryWatermarks, punch

DAY = date(2025, 3, 1)


def _service(resolver, adapter, watermarks=None, **kwargs) -> SyncService:
    return SyncService(adapter, resolver, watermarks if watermarks is not None else InMemoryWatermarks(), **kwargs)


def test_end_to_end_check_in_and_check_out(resolver, attendance_repo):
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00"), punch("E100", "2025-03-01 18:20:00")])

    result = _service(resolver, adapter).sync()

    assert result.outcome is SyncOutcome.OK
    assert result.stats.as_dict() == {
        "fetched": 2,
        "check_ins": 1,
        "check_outs": 1,
        "skipped": 0,
        "errors": 0,
        "employees_not_found": 0,
        "employees_created": 0,
    }
    check_in = attendance_repo.attendances[(1, DAY, RecordKind.CHECK_IN)]
    assert (check_in.punch_time, check_in.status) == (time(9, 10), RecordStatus.LATE)
    leave = attendance_repo.leaves[(1, DAY, RecordKind.CHECK_OUT)]
    assert (leave.punch_time, leave.status) == (time(18, 20), RecordStatus.ON_TIME)
    assert [o.duration for o in attendance_repo.overtimes] == [timedelta(minutes=20)]
    assert [lt.duration for lt in attendance_repo.late_times] == [timedelta(minutes=10)]


def test_second_run_is_idempotent(resolver, attendance_repo):
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00"), punch("E100", "2025-03-01 18:20:00")])
    service = _service(resolver, adapter)

    service.sync()
    second = service.sync(full=True)

    assert (second.stats.check_ins, second.stats.check_outs, second.stats.skipped) == (0, 0, 2)
    assert len(attendance_repo.attendances) == 1
    assert len(attendance_repo.leaves) == 1
    assert len(attendance_repo.late_times) == 1
    assert len(attendance_repo.overtimes) == 1


def test_unreachable_source_fails_fast(resolver, attendance_repo):
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00")], reachable=False)

    result = _service(resolver, adapter).sync()

    assert result.outcome is SyncOutcome.CONNECTIVITY_FAILED
    assert result.stats.fetched == 0
    assert adapter.fetch_calls == []
    assert attendance_repo.attendances == {}


def test_connectivity_error_during_fetch(resolver, attendance_repo):
    adapter = FakeAdapter(fetch_error=ConnectivityError("timed out"))

    result = _service(resolver, adapter).sync()

    assert result.outcome is SyncOutcome.CONNECTIVITY_FAILED
    assert "timed out" in result.message


def test_unknown_employee_is_counted_not_raised(resolver, attendance_repo):
    adapter = FakeAdapter([punch("X1", "2025-03-01 09:00:00")])

    result = _service(resolver, adapter).sync()

    assert result.outcome is SyncOutcome.OK
    assert result.stats.employees_not_found == 1
    assert attendance_repo.attendances == {}


def test_failing_group_is_isolated(resolver, attendance_repo):
    attendance_repo.fail_for_employee = 2
    watermarks = InMemoryWatermarks()
    adapter = FakeAdapter([
        punch("E100", "2025-03-01 09:10:00"),
        punch("E200", "2025-03-01 10:00:00"),
        punch("E100", "2025-03-01 18:20:00"),
    ])

    result = _service(resolver, adapter, watermarks).sync()

    assert result.outcome is SyncOutcome.PARTIAL_WITH_ERRORS
    assert result.stats.errors == 1
    assert result.stats.check_ins == 1
    assert result.stats.check_outs == 1
    # Watermark stops before the failed group's first punch.
    assert watermarks.marks["fake"] == datetime(2025, 3, 1, 9, 10)


def test_watermark_advances_and_bounds_next_fetch(resolver):
    watermarks = InMemoryWatermarks()
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00")])
    service = _service(resolver, adapter, watermarks)

    first = service.sync()
    service.sync()

    assert first.watermark == datetime(2025, 3, 1, 9, 10)
    assert watermarks.marks["fake"] == datetime(2025, 3, 1, 9, 10)
    assert adapter.fetch_calls[0] == (None, None)
    assert adapter.fetch_calls[1][0] == datetime(2025, 3, 1) - timedelta(microseconds=1)


def test_rewound_watermark_recovers_late_check_out(resolver, attendance_repo):
    watermarks = InMemoryWatermarks()
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00")])
    service = _service(resolver, adapter, watermarks)
    service.sync()

    adapter.events.append(punch("E100", "2025-03-01 18:20:00"))
    second = service.sync()

    assert (second.stats.fetched, second.stats.check_outs, second.stats.skipped) == (2, 1, 1)
    assert (1, DAY, RecordKind.CHECK_OUT) in attendance_repo.leaves


def test_explicit_since_wins_over_watermark(resolver):
    watermarks = InMemoryWatermarks(fake=datetime(2025, 3, 5, 8, 0))
    adapter = FakeAdapter()
    since = datetime(2025, 3, 1)

    result = _service(resolver, adapter, watermarks).sync(since)

    assert adapter.fetch_calls == [(since, None)]
    assert result.since == since


def test_full_ignores_watermark(resolver):
    watermarks = InMemoryWatermarks(fake=datetime(2025, 3, 5, 8, 0))
    adapter = FakeAdapter()

    _service(resolver, adapter, watermarks).sync(full=True)

    assert adapter.fetch_calls == [(None, None)]


def test_watermark_never_moves_back(resolver):
    watermarks = InMemoryWatermarks(fake=datetime(2025, 3, 5, 8, 0))
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00")])

    _service(resolver, adapter, watermarks).sync(datetime(2025, 2, 28))

    assert watermarks.marks["fake"] == datetime(2025, 3, 5, 8, 0)


def test_marks_processed_except_unknown_employees(resolver):
    adapter = FakeAdapter([
        punch("E100", "2025-03-01 09:10:00", source_event_id=1),
        punch("E100", "2025-03-01 18:20:00", source_event_id=2),
        punch("X1", "2025-03-01 09:00:00", source_event_id=3),
    ])

    _service(resolver, adapter, mark_processed=True).sync()

    assert sorted(adapter.marked) == [1, 2]


def test_mark_processed_off_by_default(resolver):
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00", source_event_id=1)])

    _service(resolver, adapter).sync()

    assert adapter.marked == []


def test_thread_pool_gives_same_stats(resolver, attendance_repo, writer):
    events = []
    for day in range(1, 11):
        events.append(punch("E100", f"2025-03-{day:02d} 09:10:00"))
        events.append(punch("E100", f"2025-03-{day:02d} 18:20:00"))
        events.append(punch("E200", f"2025-03-{day:02d} 08:00:00"))
    adapter = FakeAdapter(events)

    result = _service(resolver, adapter, max_workers=4).sync()

    assert result.stats.check_ins == 20
    assert result.stats.check_outs == 10
    assert result.stats.errors == 0
    assert len(attendance_repo.attendances) == 20
    assert len(writer.locks) == 0


def test_summary_text(resolver):
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00"), punch("E100", "2025-03-01 18:20:00")])

    result = _service(resolver, adapter).sync()

    assert result.summary() == "fake: 2 fetched, 1 check-ins, 1 check-outs"
    assert result.as_dict()["outcome"] == "ok"


def test_failed_side_record_is_retried_with_its_parent(resolver, attendance_repo):
    attendance_repo.fail_side_records = True
    watermarks = InMemoryWatermarks()
    adapter = FakeAdapter([punch("E100", "2025-03-01 09:10:00"), punch("E100", "2025-03-01 18:20:00")])
    service = _service(resolver, adapter, watermarks)

    first = service.sync()

    assert first.stats.errors == 1
    assert attendance_repo.attendances == {}
    assert "fake" not in watermarks.marks

    attendance_repo.fail_side_records = False
    second = service.sync()

    assert (second.stats.check_ins, second.stats.check_outs, second.stats.errors) == (1, 1, 0)
    assert [lt.duration for lt in attendance_repo.late_times] == [timedelta(minutes=10)]
    assert [o.duration for o in attendance_repo.overtimes] == [timedelta(minutes=20)]
