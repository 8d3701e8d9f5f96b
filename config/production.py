import os

from .config import DB_CONFIG, DEVICE_LOGS_DB_URL, HIKVISION_DB_CONFIG, LOG_LEVEL, build_sync_config, env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

SYNC_CONFIG = build_sync_config(hikvision_db=HIKVISION_DB_CONFIG, device_logs_url=DEVICE_LOGS_DB_URL)

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
