"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_DEVICE_LOGS_LOOKBACK_DAYS = 7
DEFAULT_HIKVISION_LOOKBACK_DAYS = 30
DEFAULT_HIKVISION_TABLE = "hik_attendance_logs"
DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10
DEFAULT_QUERY_TIMEOUT_SECONDS = 60

SOURCE_DEVICE_LOGS = "device_logs"
SOURCE_HIKVISION = "hikvision"

AUTO_CREATED_EMAIL_DOMAIN = "hikvision.local"
