"""Adapter for the Hikvision access-control log table (MySQL).

Columns: id, emp_code, person_name, auth_datetime, direction, device_name,
access_date, access_time, emp_dept, card_no, processed.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import now_local
from ..core.constants import (
    DEFAULT_HIKVISION_LOOKBACK_DAYS,
    DEFAULT_HIKVISION_TABLE,
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    SOURCE_HIKVISION,
)
from ..core.enums import PunchDirection
from ..core.exceptions import ConnectivityError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_connection_failure, normalize_mysql_datetime
from .base import SourceAdapter
from .model import RawEvent

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _require_identifier(value: str) -> str:
    if not value or not _IDENTIFIER.match(value):
        raise ValidationError(f"Invalid table name: {value!r}")
    return value


def _row_key(r: dict) -> Optional[tuple[str, date]]:
    code = str(r.get("emp_code") or "").strip()
    if not code or not r.get("auth_datetime"):
        return None
    return code, normalize_mysql_datetime(r["auth_datetime"]).date()


class HikvisionAdapter(SourceAdapter):
    name = SOURCE_HIKVISION
    supports_mark_processed = True

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        table: str = DEFAULT_HIKVISION_TABLE,
        lookback_days: int = DEFAULT_HIKVISION_LOOKBACK_DAYS,
        unprocessed_only: bool = False,
        query_timeout: Optional[float] = DEFAULT_QUERY_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._conn_factory = conn_factory
        self._table = _require_identifier(table)
        self._lookback_days = int(lookback_days)
        self._unprocessed_only = bool(unprocessed_only)
        self._query_timeout = query_timeout
        self._clock = clock

    @property
    def table(self) -> str:
        return self._table

    def test_connection(self) -> bool:
        try:
            conn = self._conn_factory.connect()
            conn.close()
            return True
        except Exception as exc:
            logger.error("Hikvision MySQL connection failed: %s", exc)
            return False

    def fetch_events(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[RawEvent]:
        """Events after `since` (default lookback) and at/before `until`.

        With `unprocessed_only`, unprocessed rows only pick which
        (employee, day) pairs changed; every punch of those days is returned
        so first/last are taken over the whole day.
        """
        lower = since if since is not None else self._clock() - timedelta(days=self._lookback_days)

        clauses = ["auth_datetime > %s"]
        params: list[object] = [lower]
        if until is not None:
            clauses.append("auth_datetime <= %s")
            params.append(until)

        try:
            if self._unprocessed_only:
                rows = self._whole_days_with_unprocessed(clauses, params, until)
            else:
                rows = self._select(clauses, params)
        except mysql.connector.Error as exc:
            if is_connection_failure(exc):
                raise ConnectivityError(f"Hikvision query failed: {exc}") from exc
            logger.error("Failed to fetch Hikvision events: %s", exc)
            return []

        events = [self._to_event(r) for r in rows if _row_key(r) is not None]
        dropped = len(rows) - len(events)
        if dropped:
            logger.warning("Dropped %d Hikvision rows without emp_code or auth_datetime", dropped)
        logger.info("Fetched %d Hikvision events from %s", len(events), self._table)
        return events

    def _select(self, clauses: list[str], params: list[object]) -> list[dict]:
        hint = f"/*+ MAX_EXECUTION_TIME({int(self._query_timeout * 1000)}) */ " if self._query_timeout else ""
        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {hint}id, emp_code, person_name, auth_datetime, direction, device_name,
                       access_date, access_time, emp_dept, card_no, processed
                FROM {self._table}
                WHERE {where}
                ORDER BY auth_datetime ASC, id ASC
                """,
                tuple(params),
            )
            return fetchall(cur)

    def _whole_days_with_unprocessed(self, clauses, params, until: Optional[datetime]) -> list[dict]:
        pending = self._select([*clauses, "(processed = 0 OR processed IS NULL)"], params)
        keys = {k for k in map(_row_key, pending) if k is not None}
        if not keys:
            return []

        codes = sorted({code for code, _ in keys})
        days = sorted({day for _, day in keys})
        day_clauses = [
            f"emp_code IN ({','.join(['%s'] * len(codes))})",
            "auth_datetime >= %s",
            "auth_datetime < %s",
        ]
        day_params: list[object] = [
            *codes,
            datetime.combine(days[0], time.min),
            datetime.combine(days[-1], time.min) + timedelta(days=1),
        ]
        if until is not None:
            day_clauses.append("auth_datetime <= %s")
            day_params.append(until)

        rows = self._select(day_clauses, day_params)
        return [r for r in rows if _row_key(r) in keys]

    @staticmethod
    def _to_event(r: dict) -> RawEvent:
        return RawEvent(
            employee_code=str(r["emp_code"]).strip(),
            timestamp=normalize_mysql_datetime(r["auth_datetime"]),
            direction=PunchDirection.parse(r.get("direction")),
            source_event_id=r.get("id"),
            employee_name=r.get("person_name"),
            device=r.get("device_name"),
            department=r.get("emp_dept"),
        )

    def mark_processed(self, event_ids: Sequence[Any]) -> int:
        ids = [i for i in event_ids if i is not None]
        if not ids:
            return 0

        placeholders = ",".join(["%s"] * len(ids))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE {self._table} SET processed=1 WHERE id IN ({placeholders})",
                    tuple(ids),
                )
                return int(cur.rowcount or 0)
        except (mysql.connector.Error, ConnectivityError) as exc:
            logger.warning("Failed to mark Hikvision events as processed: %s", exc)
            return 0

    def get_stats(self) -> dict:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT
                        COUNT(*) AS total_records,
                        COALESCE(SUM(DATE(auth_datetime) = CURDATE()), 0) AS today_records,
                        COALESCE(SUM(processed = 0 OR processed IS NULL), 0) AS unprocessed_records,
                        MAX(auth_datetime) AS latest_event
                    FROM {self._table}
                    """
                )
                r = fetchone(cur) or {}
        except Exception as exc:
            return {"error": str(exc)}

        return {
            "table": self._table,
            "total_records": int(r.get("total_records") or 0),
            "today_records": int(r.get("today_records") or 0),
            "unprocessed_records": int(r.get("unprocessed_records") or 0),
            "latest_event": r.get("latest_event"),
        }
