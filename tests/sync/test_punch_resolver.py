from __future__ import annotations

from datetime import date, time, timedelta

import pytest

from src.attendance_sync.attendance_sync.attendance.factory import AttendanceStrategyFactory
from src.attendance_sync.attendance_sync.attendance.model import LateTime, Overtime
from src.attendance_sync.attendance_sync.core.enums import Disposition, PunchDirection, RecordKind, RecordStatus
from src.attendance_sync.attendance_sync.employees.model import Employee, Schedule
from src.attendance_sync.attendance_sync.sync.grouper import group_events
from src.attendance_sync.attendance_sync.sync.model import EventGroup
from src.attendance_sync.attendance_sync.sync.resolver import PunchResolver
from tests.fakes import InMemoryEmployees, punch

DAY = date(2025, 3, 1)


def _group(*events) -> EventGroup:
    (group,) = group_events(events).values()
    return group


def _check_in(repo, employee_id=1):
    return repo.attendances.get((employee_id, DAY, RecordKind.CHECK_IN))


def _check_out(repo, employee_id=1):
    return repo.leaves.get((employee_id, DAY, RecordKind.CHECK_OUT))


def test_late_check_in_creates_late_time(resolver, attendance_repo):
    result = resolver.resolve(_group(punch("E100", "2025-03-01 09:15:00")))

    assert result.check_ins == 1
    assert _check_in(attendance_repo).status == RecordStatus.LATE
    assert _check_in(attendance_repo).punch_time == time(9, 15)
    assert attendance_repo.late_times == [LateTime(1, DAY, timedelta(minutes=15))]


def test_early_check_in_is_on_time(resolver, attendance_repo):
    resolver.resolve(_group(punch("E100", "2025-03-01 08:59:00")))

    assert _check_in(attendance_repo).status == RecordStatus.ON_TIME
    assert attendance_repo.late_times == []


def test_single_punch_never_creates_check_out(resolver, attendance_repo):
    result = resolver.resolve(_group(punch("E100", "2025-03-01 18:30:00")))

    assert result.check_ins == 1
    assert result.check_outs == 0
    assert attendance_repo.leaves == {}


def test_identical_time_punches_do_not_create_check_out(resolver, attendance_repo):
    result = resolver.resolve(_group(
        punch("E100", "2025-03-01 09:00:00"),
        punch("E100", "2025-03-01 09:00:00.400000"),
    ))

    assert result.check_ins == 1
    assert result.check_outs == 0
    assert attendance_repo.leaves == {}


def test_overtime_on_late_check_out(resolver, attendance_repo):
    resolver.resolve(_group(punch("E100", "2025-03-01 08:55:00"), punch("E100", "2025-03-01 18:30:00")))

    leave = _check_out(attendance_repo)
    assert leave.status == RecordStatus.ON_TIME
    assert leave.punch_time == time(18, 30)
    assert attendance_repo.overtimes == [Overtime(1, DAY, timedelta(minutes=30))]


def test_early_leave_has_no_overtime(resolver, attendance_repo):
    resolver.resolve(_group(punch("E100", "2025-03-01 08:55:00"), punch("E100", "2025-03-01 17:45:00")))

    assert _check_out(attendance_repo).status == RecordStatus.EARLY_LEAVE
    assert attendance_repo.overtimes == []


def test_middle_punches_are_ignored(resolver, attendance_repo):
    resolver.resolve(_group(
        punch("E100", "2025-03-01 12:00:00"),
        punch("E100", "2025-03-01 18:05:00"),
        punch("E100", "2025-03-01 08:50:00"),
        punch("E100", "2025-03-01 13:00:00"),
    ))

    assert _check_in(attendance_repo).punch_time == time(8, 50)
    assert _check_out(attendance_repo).punch_time == time(18, 5)


def test_resolver_resorts_out_of_order_events(resolver, attendance_repo):
    group = EventGroup(
        employee_code="E100",
        work_date=DAY,
        events=(punch("E100", "2025-03-01 18:20:00"), punch("E100", "2025-03-01 09:10:00")),
    )

    resolver.resolve(group)

    assert _check_in(attendance_repo).punch_time == time(9, 10)
    assert _check_out(attendance_repo).punch_time == time(18, 20)


def test_no_schedule_defaults_to_on_time(resolver, attendance_repo):
    resolver.resolve(_group(punch("E200", "2025-03-01 11:00:00"), punch("E200", "2025-03-01 12:00:00")))

    assert _check_in(attendance_repo, 2).status == RecordStatus.ON_TIME
    assert _check_out(attendance_repo, 2).status == RecordStatus.ON_TIME
    assert attendance_repo.late_times == []
    assert attendance_repo.overtimes == []


def test_existing_records_are_skipped_without_side_records(resolver, attendance_repo):
    group = _group(punch("E100", "2025-03-01 09:15:00"), punch("E100", "2025-03-01 18:30:00"))
    resolver.resolve(group)

    again = resolver.resolve(group)

    assert (again.check_ins, again.check_outs, again.skipped) == (0, 0, 2)
    assert again.disposition is Disposition.SKIPPED
    assert len(attendance_repo.late_times) == 1
    assert len(attendance_repo.overtimes) == 1


def test_unknown_employee_writes_nothing(resolver, attendance_repo):
    result = resolver.resolve(_group(punch("X999", "2025-03-01 09:00:00"), punch("X999", "2025-03-01 18:00:00")))

    assert result.employee_not_found is True
    assert result.disposition is Disposition.EMPLOYEE_NOT_FOUND
    assert attendance_repo.attendances == {}
    assert attendance_repo.leaves == {}


def test_failing_write_raises_instead_of_a_disposition(resolver, attendance_repo):
    attendance_repo.fail_for_employee = 1

    with pytest.raises(RuntimeError):
        resolver.resolve(_group(punch("E100", "2025-03-01 09:10:00")))

    assert list(Disposition) == [Disposition.CREATED, Disposition.SKIPPED, Disposition.EMPLOYEE_NOT_FOUND]


def test_legacy_id_fallback(writer, attendance_repo, e100):
    resolver = PunchResolver(InMemoryEmployees(e100), writer, use_legacy_id=True)

    result = resolver.resolve(_group(punch("0042", "2025-03-01 08:00:00", legacy_id=1)))

    assert result.check_ins == 1
    assert _check_in(attendance_repo) is not None


def test_legacy_id_ignored_when_not_enabled(resolver):
    result = resolver.resolve(_group(punch("0042", "2025-03-01 08:00:00", legacy_id=1)))

    assert result.employee_not_found is True


def test_auto_create_employee(writer, attendance_repo):
    employees = InMemoryEmployees()
    resolver = PunchResolver(employees, writer, auto_create_employees=True)

    result = resolver.resolve(_group(punch("H77", "2025-03-01 08:00:00", employee_name="Lê C")))

    assert result.employee_created is True
    assert result.check_ins == 1
    assert employees.created == [{"name": "Lê C", "pin_code": "H77", "email": "H77@hikvision.local"}]


def test_auto_create_without_name_uses_code(writer):
    employees = InMemoryEmployees()
    PunchResolver(employees, writer, auto_create_employees=True).resolve(_group(punch("H78", "2025-03-01 08:00:00")))

    assert employees.created[0]["name"] == "HIK-H78"


def test_auto_create_failure_counts_as_not_found(writer, attendance_repo):
    employees = InMemoryEmployees()
    employees.fail_create = True
    resolver = PunchResolver(employees, writer, auto_create_employees=True)

    result = resolver.resolve(_group(punch("H79", "2025-03-01 08:00:00")))

    assert result.employee_not_found is True
    assert result.employee_created is False
    assert attendance_repo.attendances == {}


def test_direction_is_informational_only(resolver, attendance_repo):
    result = resolver.resolve(_group(
        punch("E100", "2025-03-01 08:50:00", direction=PunchDirection.OUT),
        punch("E100", "2025-03-01 18:10:00", direction=PunchDirection.IN),
    ))

    assert result.has_explicit_in and result.has_explicit_out
    assert _check_in(attendance_repo).punch_time == time(8, 50)
    assert _check_out(attendance_repo).punch_time == time(18, 10)


def test_grace_minutes_from_factory(employees, writer, attendance_repo):
    resolver = PunchResolver(employees, writer, strategy_factory=AttendanceStrategyFactory(grace_minutes=5))

    resolver.resolve(_group(punch("E100", "2025-03-01 09:04:00")))

    assert _check_in(attendance_repo).status == RecordStatus.ON_TIME


def test_overnight_shift_uses_naive_time_of_day(writer, attendance_repo):
    night = Employee(employee_id=9, name="Night", pin_code="N1", schedule=Schedule(time_in=time(22, 0), time_out=time(6, 0)))
    resolver = PunchResolver(InMemoryEmployees(night), writer)

    resolver.resolve(_group(punch("N1", "2025-03-01 22:05:00"), punch("N1", "2025-03-01 23:59:00")))

    # Same-day naive arithmetic: 23:59 >= 06:00 counts as 17:59 overtime.
    assert _check_in(attendance_repo, 9).status == RecordStatus.LATE
    assert attendance_repo.late_times == [LateTime(9, DAY, timedelta(minutes=5))]
    assert attendance_repo.overtimes == [Overtime(9, DAY, timedelta(hours=17, minutes=59))]
