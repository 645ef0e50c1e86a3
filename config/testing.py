import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ORG_TIMEZONE = "Asia/Jakarta"

FACEPP_API_KEY = ""
FACEPP_API_SECRET = ""
FACEPP_BASE_URL = "https://api-us.faceplusplus.com"

PHOTO_STORAGE_DIR = os.getenv("PHOTO_STORAGE_DIR", "var/test-photos")
PHOTO_BASE_URL = "/photos"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
