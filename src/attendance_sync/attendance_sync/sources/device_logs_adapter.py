"""Adapter for the legacy eTimeTrackLite-style punch database.

Punches live in one table per month, `DeviceLogs_{month}_{year}`
(columns LogDate, UserId, DeviceId), joined with `Employees` on
`UserId = EmployeeCodeInDevice`. The store is usually SQL Server, so the
adapter talks SQLAlchemy Core and works with any dialect URL.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..common.datetime_utils import iter_months, now_local, start_of_day
from ..core.constants import DEFAULT_DEVICE_LOGS_LOOKBACK_DAYS, DEFAULT_QUERY_TIMEOUT_SECONDS, SOURCE_DEVICE_LOGS
from ..core.exceptions import ConnectivityError
from .base import SourceAdapter
from .model import RawEvent

logger = logging.getLogger(__name__)

TableNameResolver = Callable[[date], str]


def is_connection_failure(exc: SQLAlchemyError) -> bool:
    """Lost connection or driver timeout (DBAPI OperationalError), as opposed to a bad query."""
    if isinstance(exc, sa.exc.OperationalError):
        return True
    return bool(getattr(exc, "connection_invalidated", False))


def device_logs_table_name(day: date) -> str:
    """DeviceLogs_{month}_{year}, month without zero padding (DeviceLogs_1_2026)."""
    return f"DeviceLogs_{day.month}_{day.year}"


def _device_logs_table(name: str):
    return sa.table(
        name,
        sa.column("LogDate", sa.DateTime),
        sa.column("UserId"),
        sa.column("DeviceId"),
    )


_EMPLOYEES = sa.table(
    "Employees",
    sa.column("EmployeeCodeInDevice"),
    sa.column("EmployeeCode"),
    sa.column("EmployeeId"),
    sa.column("EmployeeName"),
)


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).strip())


class DeviceLogsAdapter(SourceAdapter):
    name = SOURCE_DEVICE_LOGS

    def __init__(
        self,
        engine: Engine,
        *,
        lookback_days: int = DEFAULT_DEVICE_LOGS_LOOKBACK_DAYS,
        table_name_resolver: TableNameResolver = device_logs_table_name,
        clock: Callable[[], datetime] = now_local,
        query_timeout: Optional[float] = DEFAULT_QUERY_TIMEOUT_SECONDS,
    ):
        self._engine = engine
        self._lookback_days = int(lookback_days)
        self._query_timeout = query_timeout
        self._table_name = table_name_resolver
        self._clock = clock

    def test_connection(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(sa.text("SELECT 1"))
            return True
        except Exception as exc:
            logger.error("Device logs connection failed: %s", exc)
            return False

    def table_names_for(self, since: datetime, until: datetime) -> list[str]:
        return [self._table_name(date(y, m, 1)) for y, m in iter_months(since.date(), until.date())]

    def fetch_events(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[RawEvent]:
        now = self._clock()
        lower = since if since is not None else now - timedelta(days=self._lookback_days)
        upper = until if until is not None else max(now, lower)

        try:
            conn = self._engine.connect()
        except SQLAlchemyError as exc:
            raise ConnectivityError(f"Device logs source unreachable: {exc}") from exc

        events: list[RawEvent] = []
        dropped = 0
        with conn:
            try:
                self._apply_query_timeout(conn)
                inspector = sa.inspect(conn)
                for table_name in self.table_names_for(lower, upper):
                    if not inspector.has_table(table_name):
                        logger.warning("DeviceLogs table %s does not exist", table_name)
                        continue

                    rows = conn.execute(self._select(table_name, lower, until)).mappings().all()
                    for r in rows:
                        event = self._to_event(table_name, r)
                        if event is None:
                            dropped += 1
                        else:
                            events.append(event)
            except SQLAlchemyError as exc:
                if is_connection_failure(exc):
                    raise ConnectivityError(f"Device logs query failed: {exc}") from exc
                logger.error("Failed to fetch punch logs: %s", exc)
                return []
            except ValueError as exc:
                logger.error("Failed to read punch logs: %s", exc)
                return []

        if dropped:
            logger.warning("Dropped %d punch logs without employee code or time", dropped)
        events.sort(key=lambda e: e.timestamp)
        logger.info("Fetched %d punch logs from device logs", len(events))
        return events

    def _apply_query_timeout(self, conn) -> None:
        # pyodbc exposes a per-connection query timeout in seconds.
        dbapi_conn = conn.connection.dbapi_connection
        if self._query_timeout and hasattr(dbapi_conn, "timeout"):
            dbapi_conn.timeout = int(self._query_timeout)

    def _select(self, table_name: str, lower: datetime, until: Optional[datetime]):
        logs = _device_logs_table(table_name).alias("L")
        employees = _EMPLOYEES.alias("E")

        stmt = (
            sa.select(
                logs.c.LogDate.label("punch_time"),
                logs.c.DeviceId.label("device_id"),
                employees.c.EmployeeCode.label("employee_code"),
                employees.c.EmployeeId.label("legacy_id"),
                employees.c.EmployeeName.label("employee_name"),
            )
            .select_from(logs.join(employees, logs.c.UserId == employees.c.EmployeeCodeInDevice))
            .where(logs.c.LogDate > lower)
        )
        if until is not None:
            stmt = stmt.where(logs.c.LogDate <= until)
        return stmt.order_by(logs.c.LogDate.asc())

    @staticmethod
    def _to_event(table_name: str, r) -> Optional[RawEvent]:
        code = r.get("employee_code")
        if code is None or not str(code).strip() or r.get("punch_time") is None:
            return None

        punch_time = _as_datetime(r["punch_time"])
        legacy_id = r.get("legacy_id")
        return RawEvent(
            employee_code=str(code).strip(),
            timestamp=punch_time,
            source_event_id=(table_name, r.get("device_id"), punch_time.isoformat()),
            employee_name=r.get("employee_name"),
            legacy_id=int(legacy_id) if legacy_id is not None else None,
            device=str(r["device_id"]) if r.get("device_id") is not None else None,
        )

    def get_stats(self) -> dict:
        now = self._clock()
        table_name = self._table_name(now.date())
        logs = _device_logs_table(table_name)
        try:
            with self._engine.connect() as conn:
                if not sa.inspect(conn).has_table(table_name):
                    return {"table": table_name, "error": "table does not exist"}
                total = conn.execute(sa.select(sa.func.count()).select_from(logs)).scalar_one()
                today = conn.execute(
                    sa.select(sa.func.count()).select_from(logs).where(logs.c.LogDate >= start_of_day(now))
                ).scalar_one()
                latest = conn.execute(sa.select(sa.func.max(logs.c.LogDate))).scalar()
        except Exception as exc:
            return {"error": str(exc)}

        return {
            "table": table_name,
            "total_records": int(total),
            "today_records": int(today),
            "latest_punch": latest,
        }
