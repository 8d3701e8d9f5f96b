"""Create the attendance database and apply database/schema.sql.

    python scripts/init_db.py                 # schema only
    python scripts/init_db.py --check-sources # also test connections to the punch sources
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_sync.attendance_sync.container import build_container
from src.attendance_sync.attendance_sync.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("init_db")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--check-sources", action="store_true", help="Test connections to the punch sources.")
    args = parser.parse_args(argv)

    load_dotenv(REPO_ROOT / ".env", override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")

    db_config = dict(settings.DB_CONFIG)
    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )

    if not args.check_sources:
        return 0

    container = build_container(db_config=db_config, sync_config=settings.SYNC_CONFIG)
    if not container.sync_services:
        logger.warning("No punch source configured (set DEVICE_LOGS_DB_URL or HIKVISION_DB_NAME)")
        return 1

    failed = 0
    for name, service in container.sync_services.items():
        ok = service.test_connection()
        print(f"{name}: {'reachable' if ok else 'UNREACHABLE'}")
        failed += 0 if ok else 1
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
