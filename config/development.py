import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "activity_reports"),
}

# Attachment bytes live under this directory
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "storage")
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also upsert one demo account per role on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
