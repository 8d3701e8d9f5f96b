import os

from .config import DB_CONFIG, build_sync_config

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "DEBUG"

# Sources are wired explicitly by tests.
SYNC_CONFIG = build_sync_config(hikvision_db=None, device_logs_url=os.getenv("TEST_DEVICE_LOGS_DB_URL", ""))

AUTO_INIT_DB = False
