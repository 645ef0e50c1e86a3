import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "attendance"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Jakarta")

FACEPP_API_KEY = os.getenv("FACEPP_API_KEY", "")
FACEPP_API_SECRET = os.getenv("FACEPP_API_SECRET", "")
FACEPP_BASE_URL = os.getenv("FACEPP_BASE_URL", "https://api-us.faceplusplus.com")
FACEPP_TIMEOUT = float(os.getenv("FACEPP_TIMEOUT", "10"))

PHOTO_STORAGE_DIR = os.getenv("PHOTO_STORAGE_DIR", "/var/lib/attendance-engine/photos")
PHOTO_BASE_URL = os.getenv("PHOTO_BASE_URL", "/photos")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
