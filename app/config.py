import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'linkdeck.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    ACTIVE_COMPANY_COOKIE = os.environ.get("ACTIVE_COMPANY_COOKIE", "activeCompanyId")
    ACTIVE_COMPANY_COOKIE_MAX_AGE = int(
        os.environ.get("ACTIVE_COMPANY_COOKIE_MAX_AGE", str(60 * 60 * 24 * 30))
    )
    ACTIVE_COMPANY_COOKIE_SECURE = (
        os.environ.get("ACTIVE_COMPANY_COOKIE_SECURE", "0") == "1"
    )
    MAX_COMPANIES_PER_USER = int(os.environ.get("MAX_COMPANIES_PER_USER", "5"))
    HABIT_CHECKIN_HISTORY_DAYS = int(os.environ.get("HABIT_CHECKIN_HISTORY_DAYS", "30"))
    NOTIFICATION_HISTORY_LIMIT = int(
        os.environ.get("NOTIFICATION_HISTORY_LIMIT", "100")
    )
    SEARCH_RESULT_LIMIT = int(os.environ.get("SEARCH_RESULT_LIMIT", "50"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "DEBUG"
