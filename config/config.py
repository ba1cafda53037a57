"""Settings shared by every environment, read from the process environment (.env via python-dotenv)."""

import os
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "staffdesk-dev-secret"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "staffdesk")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Overdue clock-out reminders
    OVERDUE_HOURS = int(os.environ.get("OVERDUE_HOURS", "9"))
    TOKEN_TTL_HOURS = int(os.environ.get("TOKEN_TTL_HOURS", "12"))
    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5000")
    CRON_SECRET = os.environ.get("CRON_SECRET", "")

    # Gmail API (OAuth refresh token)
    GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET")
    GOOGLE_REFRESH_TOKEN = os.environ.get("GOOGLE_REFRESH_TOKEN")
    MAIL_SENDER = os.environ.get("MAIL_SENDER")

    # Profile photos
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER") or str(REPO_ROOT / "uploads")
    MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))


SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

LOG_LEVEL = Config.LOG_LEVEL
OVERDUE_HOURS = Config.OVERDUE_HOURS
TOKEN_TTL_HOURS = Config.TOKEN_TTL_HOURS
PUBLIC_BASE_URL = Config.PUBLIC_BASE_URL
CRON_SECRET = Config.CRON_SECRET
GOOGLE_CLIENT_ID = Config.GOOGLE_CLIENT_ID
GOOGLE_CLIENT_SECRET = Config.GOOGLE_CLIENT_SECRET
GOOGLE_REFRESH_TOKEN = Config.GOOGLE_REFRESH_TOKEN
MAIL_SENDER = Config.MAIL_SENDER
UPLOAD_FOLDER = Config.UPLOAD_FOLDER
MAX_UPLOAD_BYTES = Config.MAX_UPLOAD_BYTES
