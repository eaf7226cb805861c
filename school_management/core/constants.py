"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Built-in attendance policy used when nothing is configured
DEFAULT_POLICY_ID = "default"
DEFAULT_POLICY_NAME = "Default policy"
DEFAULT_POLICY_DESCRIPTION = "System defaults"
DEFAULT_CONCERN_THRESHOLD = 80
DEFAULT_LATE_TOLERANCE_MINUTES = 15
DEFAULT_MAX_ABSENCES = 20

MIN_WAGE_YEAR = 2020

BULK_DEFAULT_PASSWORD = "tempPassword123"
MIN_PASSWORD_LENGTH = 6
MIN_RESET_PASSWORD_LENGTH = 8
RESET_TOKEN_HOURS = 24

AUDIT_PAGE_SIZE = 50
BACKUP_PAGE_SIZE = 20
BACKUP_KEEP_LATEST = 10
BACKUP_RETENTION_DAYS = 30

CONFIG_CACHE_SECONDS = 5 * 60
METRICS_HISTORY_HOURS = 24

DASHBOARD_ATTENDANCE_DAYS = 7
DASHBOARD_RECENT_LESSONS = 10
