import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Civil timezone used for attendance dates and working hours
ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Jakarta")

FACEPP_API_KEY = os.getenv("FACEPP_API_KEY", "")
FACEPP_API_SECRET = os.getenv("FACEPP_API_SECRET", "")
FACEPP_BASE_URL = os.getenv("FACEPP_BASE_URL", "https://api-us.faceplusplus.com")
FACEPP_TIMEOUT = float(os.getenv("FACEPP_TIMEOUT", "10"))

PHOTO_STORAGE_DIR = os.getenv("PHOTO_STORAGE_DIR", "var/photos")
PHOTO_BASE_URL = os.getenv("PHOTO_BASE_URL", "/photos")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also load leave types, office settings and demo employees
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
