"""App settings — loaded from environment."""
from __future__ import annotations

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # API
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///video_abuses.db")

    # Operator account, its blocklist applies server-wide
    SERVER_ACCOUNT_ID = int(os.getenv("SERVER_ACCOUNT_ID", "1"))

    # Admin API key (for the moderation endpoints)
    ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")

    # CORS origins (comma-separated, or * for dev)
    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")
    ]

    # Video thumbnails are served from here
    STATIC_THUMBNAILS_PATH = os.getenv("STATIC_THUMBNAILS_PATH", "/static/thumbnails/")

    # Abuse listing pagination
    ABUSES_DEFAULT_COUNT = int(os.getenv("ABUSES_DEFAULT_COUNT", "15"))
    ABUSES_MAX_COUNT = int(os.getenv("ABUSES_MAX_COUNT", "100"))

    # Observability
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

    # Logging
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
