from __future__ import annotations

import logging
from datetime import date, time
from typing import Optional

from ..attendance.factory import AttendanceStrategyFactory
from ..attendance.model import AttendanceRecord, LateTime, LeaveRecord, Overtime
from ..attendance.writer import IdempotentWriter
from ..common.datetime_utils import time_of_day
from ..core.constants import AUTO_CREATED_EMAIL_DOMAIN
from ..core.enums import WriteResult
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import EventGroup, GroupResult

logger = logging.getLogger(__name__)


class PunchResolver:
    """Turns one (employee, day) group into check-in / check-out rows.

    First punch of the day is the check-in, last punch the check-out. A
    single punch, or first and last at the same second, yields a check-in
    only. Direction metadata is recorded on the result but never overrides
    first/last.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        writer: IdempotentWriter,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        auto_create_employees: bool = False,
        use_legacy_id: bool = False,
    ):
        self._employees = employees
        self._writer = writer
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._auto_create = bool(auto_create_employees)
        self._use_legacy_id = bool(use_legacy_id)

    def resolve(self, group: EventGroup) -> GroupResult:
        result = GroupResult()

        employee = self._find_employee(group)
        if employee is None and self._auto_create:
            employee = self._create_employee(group)
            result.employee_created = employee is not None
        if employee is None:
            logger.warning("Employee not found for code: %s", group.employee_code)
            result.employee_not_found = True
            return result

        events = sorted(group.events, key=lambda e: e.timestamp)
        result.note_directions(events)

        first_time = time_of_day(events[0].timestamp)
        last_time = time_of_day(events[-1].timestamp)

        self._check_in(employee, group.work_date, first_time, result)

        if len(events) > 1 and first_time != last_time:
            self._check_out(employee, group.work_date, last_time, result)

        return result

    def _find_employee(self, group: EventGroup) -> Optional[Employee]:
        legacy_id = group.legacy_id if self._use_legacy_id else None
        return self._employees.find_by_code(group.employee_code, legacy_id=legacy_id)

    def _create_employee(self, group: EventGroup) -> Optional[Employee]:
        code = group.employee_code
        try:
            employee = self._employees.create_employee(
                name=group.employee_name or f"HIK-{code}",
                pin_code=code,
                email=f"{code}@{AUTO_CREATED_EMAIL_DOMAIN}",
            )
        except Exception:
            logger.error("Failed to create employee for code %s", code, exc_info=True)
            return None

        logger.info("Auto-created employee: %s (%s)", employee.name, code)
        return employee

    def _check_in(self, employee: Employee, work_date: date, punch: time, result: GroupResult) -> None:
        strategy = self._factory.for_checkin(punch=punch, schedule=employee.schedule)
        decision = strategy.decide_checkin(punch=punch, schedule=employee.schedule)

        record = AttendanceRecord(
            employee_id=employee.employee_id,
            work_date=work_date,
            punch_time=punch,
            status=decision.status,
        )
        late = None
        if decision.side_duration is not None:
            late = LateTime(employee.employee_id, work_date, decision.side_duration)
        if self._writer.write(record, late) is WriteResult.SKIPPED:
            result.skipped += 1
            return

        result.check_ins += 1
        logger.info("Check-in recorded for %s on %s at %s (%s)", employee.name, work_date, punch, decision.status.value)

    def _check_out(self, employee: Employee, work_date: date, punch: time, result: GroupResult) -> None:
        strategy = self._factory.for_checkout(punch=punch, schedule=employee.schedule)
        decision = strategy.decide_checkout(punch=punch, schedule=employee.schedule)

        record = LeaveRecord(
            employee_id=employee.employee_id,
            work_date=work_date,
            punch_time=punch,
            status=decision.status,
        )
        overtime = None
        if decision.side_duration is not None:
            overtime = Overtime(employee.employee_id, work_date, decision.side_duration)
        if self._writer.write(record, overtime) is WriteResult.SKIPPED:
            result.skipped += 1
            return

        result.check_outs += 1
        logger.info("Check-out recorded for %s on %s at %s (%s)", employee.name, work_date, punch, decision.status.value)
