"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 100

# Overdue clock-out reminders
DEFAULT_OVERDUE_HOURS = 9
DEFAULT_TOKEN_TTL_HOURS = 12

# Geolocation capture (browser side, milliseconds)
GEOLOCATION_TIMEOUT_MS = 5000

# Employee photos
PHOTO_PREFIX = "profile-pictures"
ALLOWED_PHOTO_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp"})

JOINING_CHART_MONTHS = 12
