from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import Employee, Schedule
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_code(self, code: str, *, legacy_id: Optional[int] = None) -> Optional[Employee]:
        clauses = ["e.pin_code=%s"]
        params: list[object] = [code]
        if legacy_id is not None:
            clauses.append("e.id=%s")
            params.append(int(legacy_id))

        where = " OR ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            # A pin_code match wins over the legacy id; first schedule by id.
            cur.execute(
                f"""
                SELECT e.id, e.name, e.pin_code, s.time_in, s.time_out
                FROM employees e
                LEFT JOIN schedule_employees se ON se.emp_id = e.id
                LEFT JOIN schedules s ON s.id = se.schedule_id
                WHERE {where}
                ORDER BY (e.pin_code = %s) DESC, e.id ASC, s.id ASC
                LIMIT 1
                """,
                tuple(params + [code]),
            )
            r = fetchone(cur)
            if not r:
                return None
            return _to_employee(r)

    def create_employee(self, *, name: str, pin_code: str, email: str) -> Employee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(name, pin_code, email)
                VALUES(%s,%s,%s)
                """,
                (name, pin_code, email),
            )
            return Employee(employee_id=int(cur.lastrowid), name=name, pin_code=pin_code, schedule=None)


def _to_employee(r: dict) -> Employee:
    schedule = None
    if r.get("time_in") is not None and r.get("time_out") is not None:
        schedule = Schedule(
            time_in=normalize_mysql_time(r["time_in"]),
            time_out=normalize_mysql_time(r["time_out"]),
        )
    return Employee(
        employee_id=int(r["id"]),
        name=r["name"],
        pin_code=r.get("pin_code"),
        schedule=schedule,
    )
