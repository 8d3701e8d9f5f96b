from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_duration
from ..core.enums import RecordKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, translate_duplicate_key
from .model import AttendanceRecord, LateTime, LeaveRecord, Overtime
from .repository import AttendanceRepository

# kind -> (table, date column)
_KEYED_TABLES = {
    RecordKind.CHECK_IN: ("attendances", "attendance_date"),
    RecordKind.CHECK_OUT: ("leaves", "leave_date"),
}


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, *, employee_id: int, work_date: date, kind: RecordKind) -> bool:
        table, date_col = _KEYED_TABLES[RecordKind(kind)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id FROM {table}
                WHERE emp_id=%s AND {date_col}=%s AND type=%s
                LIMIT 1
                """,
                (int(employee_id), work_date, int(kind)),
            )
            return fetchone(cur) is not None

    def insert_attendance(self, record: AttendanceRecord, *, late: Optional[LateTime] = None) -> int:
        with translate_duplicate_key(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(uid, emp_id, state, attendance_time, attendance_date, status, type)
                VALUES(0,%s,1,%s,%s,%s,%s)
                """,
                (
                    record.employee_id,
                    record.punch_time,
                    record.work_date,
                    record.status.db_value,
                    int(record.kind),
                ),
            )
            row_id = int(cur.lastrowid)
            if late is not None:
                cur.execute(
                    "INSERT INTO latetimes(emp_id, duration, latetime_date) VALUES(%s,%s,%s)",
                    (late.employee_id, format_duration(late.duration), late.work_date),
                )
            return row_id

    def insert_leave(self, record: LeaveRecord, *, overtime: Optional[Overtime] = None) -> int:
        with translate_duplicate_key(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(uid, emp_id, state, leave_time, leave_date, status, type)
                VALUES(0,%s,1,%s,%s,%s,%s)
                """,
                (
                    record.employee_id,
                    record.punch_time,
                    record.work_date,
                    record.status.db_value,
                    int(record.kind),
                ),
            )
            row_id = int(cur.lastrowid)
            if overtime is not None:
                cur.execute(
                    "INSERT INTO overtimes(emp_id, duration, overtime_date) VALUES(%s,%s,%s)",
                    (overtime.employee_id, format_duration(overtime.duration), overtime.work_date),
                )
            return row_id

    def last_recorded_at(self) -> dict[str, Optional[datetime]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    (SELECT MAX(created_at) FROM attendances) AS last_attendance,
                    (SELECT MAX(created_at) FROM leaves) AS last_leave
                """
            )
            r = fetchone(cur) or {}
            return {
                "last_attendance": r.get("last_attendance"),
                "last_leave": r.get("last_leave"),
            }
