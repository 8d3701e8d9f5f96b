from __future__ import annotations

import logging
from dataclasses import dataclass, field

import sqlalchemy as sa

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.writer import IdempotentWriter
from .core.constants import (
    DEFAULT_DEVICE_LOGS_LOOKBACK_DAYS,
    DEFAULT_HIKVISION_LOOKBACK_DAYS,
    DEFAULT_HIKVISION_TABLE,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_QUERY_TIMEOUT_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .sources.device_logs_adapter import DeviceLogsAdapter
from .sources.hikvision_adapter import HikvisionAdapter
from .sync.mysql_watermark_repository import MySQLWatermarkRepository
from .sync.resolver import PunchResolver
from .sync.service import SyncService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    attendance_repo: MySQLAttendanceRepository
    watermarks_repo: MySQLWatermarkRepository
    writer: IdempotentWriter

    # source name -> orchestrator, in sync order
    sync_services: dict[str, SyncService] = field(default_factory=dict)


def build_container(*, db_config: dict, sync_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    watermarks_repo = MySQLWatermarkRepository(conn)
    writer = IdempotentWriter(attendance_repo)

    factory = AttendanceStrategyFactory(
        grace_minutes=int(sync_config.get("late_grace_minutes", DEFAULT_LATE_GRACE_MINUTES))
    )
    max_workers = int(sync_config.get("max_workers", 1))

    sync_services: dict[str, SyncService] = {}

    legacy = sync_config.get("device_logs") or {}
    if legacy.get("url"):
        engine = sa.create_engine(legacy["url"], connect_args=dict(legacy.get("connect_args") or {}), pool_pre_ping=True)
        adapter = DeviceLogsAdapter(
            engine,
            lookback_days=int(legacy.get("lookback_days", DEFAULT_DEVICE_LOGS_LOOKBACK_DAYS)),
            query_timeout=legacy.get("query_timeout", DEFAULT_QUERY_TIMEOUT_SECONDS),
        )
        resolver = PunchResolver(employees_repo, writer, strategy_factory=factory, use_legacy_id=True)
        sync_services[adapter.name] = SyncService(adapter, resolver, watermarks_repo, max_workers=max_workers)
    else:
        logger.info("Device logs source disabled (no DEVICE_LOGS_DB_URL)")

    hik = sync_config.get("hikvision") or {}
    if hik.get("db"):
        adapter = HikvisionAdapter(
            DatabaseConnection(DBConfig.from_dict(hik["db"])),
            table=str(hik.get("table") or DEFAULT_HIKVISION_TABLE),
            lookback_days=int(hik.get("lookback_days", DEFAULT_HIKVISION_LOOKBACK_DAYS)),
            unprocessed_only=bool(hik.get("unprocessed_only", False)),
            query_timeout=hik.get("query_timeout", DEFAULT_QUERY_TIMEOUT_SECONDS),
        )
        resolver = PunchResolver(
            employees_repo,
            writer,
            strategy_factory=factory,
            auto_create_employees=bool(hik.get("auto_create_employees", False)),
        )
        sync_services[adapter.name] = SyncService(
            adapter,
            resolver,
            watermarks_repo,
            mark_processed=bool(hik.get("mark_processed", True)),
            max_workers=max_workers,
        )
    else:
        logger.info("Hikvision source disabled (no HIKVISION_DB_NAME)")

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        watermarks_repo=watermarks_repo,
        writer=writer,
        sync_services=sync_services,
    )
