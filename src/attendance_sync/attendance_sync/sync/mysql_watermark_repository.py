from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_datetime
from .watermark_repository import WatermarkRepository


class MySQLWatermarkRepository(WatermarkRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, source: str) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT last_event_at FROM sync_watermarks WHERE source=%s", (source,))
            r = fetchone(cur)
            return normalize_mysql_datetime(r["last_event_at"]) if r else None

    def advance(self, source: str, last_event_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sync_watermarks(source, last_event_at)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE last_event_at=GREATEST(last_event_at, VALUES(last_event_at))
                """,
                (source, last_event_at),
            )
