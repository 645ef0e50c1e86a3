"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_TIMEZONE = "Asia/Jakarta"
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

# ~7MB base64 string ≈ ~5MB image
MAX_PHOTO_BASE64_LENGTH = 7 * 1024 * 1024
MAX_PHOTO_BYTES = 5 * 1024 * 1024
PHOTO_DATA_URL_PREFIX = "data:image/"

MIN_GEOFENCE_RADIUS_METERS = 10
MAX_GEOFENCE_RADIUS_METERS = 1000

MIN_FACE_QUALITY = 50

# Analytics periods: number of days ending today
ANALYTICS_PERIOD_DAYS = {"today": 1, "week": 7, "month": 30}
