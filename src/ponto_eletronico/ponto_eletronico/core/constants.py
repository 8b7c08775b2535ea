"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "America/Sao_Paulo"
DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_DAYS = 7
DEFAULT_REPORT_DAYS = 30
MIN_PASSWORD_LENGTH = 6
