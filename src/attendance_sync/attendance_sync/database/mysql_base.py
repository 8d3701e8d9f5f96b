from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import WriteConflict
from .connection import DatabaseConnection

# Server-side MAX_EXECUTION_TIME exceeded.
ER_QUERY_TIMEOUT = 3024


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def translate_duplicate_key():
    """Re-raise MySQL duplicate-key errors as WriteConflict."""
    try:
        yield
    except mysql.connector.IntegrityError as exc:
        if getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY:
            raise WriteConflict(str(exc)) from exc
        raise


def is_connection_failure(exc: BaseException) -> bool:
    """Lost connection, network timeout or query timeout, as opposed to a bad query."""
    if isinstance(exc, (mysql.connector.OperationalError, mysql.connector.InterfaceError)):
        return True
    return getattr(exc, "errno", None) == ER_QUERY_TIMEOUT


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns come back as time, timedelta (C extension) or "HH:MM[:SS]"."""
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)
    if isinstance(value, str):
        hh, mm, *rest = value.strip().split(":")
        return time(int(hh), int(mm), int(rest[0]) if rest and rest[0] else 0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def normalize_mysql_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        return datetime.fromisoformat(value.strip())
    raise TypeError(f"Unsupported MySQL DATETIME value type: {type(value)!r}")
