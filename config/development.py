import os

from .config import DB_CONFIG, DEVICE_LOGS_DB_URL, HIKVISION_DB_CONFIG, build_sync_config, env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

SYNC_CONFIG = build_sync_config(hikvision_db=HIKVISION_DB_CONFIG, device_logs_url=DEVICE_LOGS_DB_URL)

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "1")
