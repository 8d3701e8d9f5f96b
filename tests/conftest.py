from __future__ import annotations

from datetime import datetime, time

import pytest

from src.attendance_sync.attendance_sync.attendance.writer import IdempotentWriter
from src.attendance_sync.attendance_sync.employees.model import Employee, Schedule
from src.attendance_sync.attendance_sync.sync.resolver import PunchResolver
from tests.fakes import InMemoryAttendance, InMemoryEmployees


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 1, 9, 0, 0)


@pytest.fixture
def office_schedule() -> Schedule:
    return Schedule(time_in=time(9, 0), time_out=time(18, 0))


@pytest.fixture
def e100(office_schedule) -> Employee:
    return Employee(employee_id=1, name="Nguyễn Văn A", pin_code="E100", schedule=office_schedule)


@pytest.fixture
def employees(e100) -> InMemoryEmployees:
    return InMemoryEmployees(e100, Employee(employee_id=2, name="No Schedule", pin_code="E200"))


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def writer(attendance_repo) -> IdempotentWriter:
    return IdempotentWriter(attendance_repo)


@pytest.fixture
def resolver(employees, writer) -> PunchResolver:
    return PunchResolver(employees, writer)
