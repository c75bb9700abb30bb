"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ALLOWED_FREQUENCIES = (5, 10, 15, 30, 60)
DEFAULT_FREQUENCY_MINUTES = 10
DEFAULT_MAX_LOOKBACK_MINUTES = 120

# Integer-hour [start, end) windows during which digests may be sent.
DEFAULT_ACTIVE_HOURS = {
    "breakfast": (7, 10),
    "lunch": (12, 15),
    "dinner": (19, 22),
}

# Meal service windows in minutes since midnight, before grace is applied.
MEAL_SERVICE_WINDOWS = {
    "breakfast": (7 * 60 + 30, 10 * 60 + 30),
    "lunch": (12 * 60 + 30, 15 * 60 + 30),
    "dinner": (19 * 60 + 30, 22 * 60 + 30),
}
MEAL_GRACE_MINUTES = 30

MAX_NAMES_IN_DIGEST = 5
NOTIFICATION_HISTORY_LIMIT = 50
NOTIFICATION_HISTORY_RETENTION_DAYS = 2

NOTIFICATION_SETTINGS_KEY = "notification_config"
