"""Create the target database and apply database/schema.sql.

schema.sql only holds CREATE TABLE IF NOT EXISTS statements, so applying it
on every start (AUTO_INIT_DB) is safe.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path

import mysql.connector

from ..core.exceptions import SchemaError
from .connection import DBConfig

logger = logging.getLogger(__name__)

# Statements that would pin a database name; the configured one is used instead.
_DB_SCOPED = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)

REQUIRED_TABLES = (
    "employees",
    "schedules",
    "schedule_employees",
    "attendances",
    "leaves",
    "latetimes",
    "overtimes",
    "sync_watermarks",
)


def schema_statements(sql: str) -> list[str]:
    """Split a schema file on ';' after dropping `--` comments.

    No ';' may appear inside string literals (true for schema.sql).
    """
    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]
    statements = [s.strip() for s in "\n".join(lines).split(";")]
    return [s for s in statements if s and not _DB_SCOPED.match(s)]


def _connect(target: DBConfig, *, with_database: bool = True):
    params = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "connection_timeout": target.connection_timeout,
    }
    if with_database:
        params["database"] = target.database
    return mysql.connector.connect(**params)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    statements = schema_statements(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d schema statements to %s", len(statements), target.describe())

    missing = set(REQUIRED_TABLES) - set(list_tables(db_config))
    if missing:
        raise SchemaError(f"Tables missing after applying {schema_path}: {', '.join(sorted(missing))}")


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
