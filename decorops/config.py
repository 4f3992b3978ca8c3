# decorops/config.py
from __future__ import annotations
import os
from datetime import timedelta

def _secret(env_name: str, secret_file: str | None = None) -> str | None:
    """Docker secret file wins over the environment variable."""
    if secret_file and os.path.isfile(secret_file):
        try:
            with open(secret_file, "r") as f:
                value = f.read().strip()
        except OSError:
            value = ""
        if value:
            return value
    return os.getenv(env_name) or None

def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")

class Config:
    # Flask
    SECRET_KEY = (
        _secret("FLASK_SECRET", "/run/secrets/flask_secret")
        or os.getenv("SECRET_KEY")
        or "dev-secret-change-me"
    )
    ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = ENV != "production"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Storage
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///decorops.db")
    SQL_ECHO = _flag("SQL_ECHO", False)
    # seconds a SQLite writer waits on a locked database before giving up
    DB_BUSY_TIMEOUT = float(os.getenv("DB_BUSY_TIMEOUT", "15"))

    # Tenant tokens
    DECOROPS_JWT_SECRET = (
        _secret("DECOROPS_JWT_SECRET", "/run/secrets/decorops_jwt_secret")
        or "dev-jwt-secret-change-me"
    )
    TOKEN_TTL = timedelta(hours=float(os.getenv("TOKEN_TTL_HOURS", "24")))

    # Rate limits (Flask-Limiter)
    RATELIMIT_ENABLED = _flag("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    LOGIN_RATE = os.getenv("LOGIN_RATE", "20 per hour")
    ACTION_RATE = os.getenv("ACTION_RATE", "600 per hour")

    ENABLE_CORS = _flag("ENABLE_CORS", False)
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

config = Config()
