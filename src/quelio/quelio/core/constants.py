"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DAY_KEY_FORMAT = "%d-%m-%Y"
PORTAL_DATE_FORMAT = "%d/%m/%Y"
LAST_SAVE_FORMAT = "%d/%m/%Y %H:%M:%S"

MINUTES_PER_DAY = 24 * 60

DEFAULT_TIMEZONE = "Europe/Paris"
DEFAULT_THEME_MAX_LENGTH = 50
DEFAULT_PRIMARY_COLOR = "4F46E5"
DEFAULT_SECONDARY_COLOR = "6366F1"
DEFAULT_BACKGROUND_COLOR = "1a1d29"
