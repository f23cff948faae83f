"""App settings: loaded from environment."""
from __future__ import annotations

import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_JWT_SECRET = "caffeine-dev-secret-change-in-prod"


class Settings:
    # API
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    # Database (users/posts/comments are owned by the content store, same DB)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///caffeine.db")

    # Every storage call is bounded by this many seconds
    STORAGE_TIMEOUT_SECONDS = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "5"))

    # Auth: HS256 secret shared with the authentication provider
    JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)

    # Admin API key (moderator workflow: report queue + status changes)
    ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")

    # CORS origins (comma-separated, or * for dev)
    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")
    ]

    # Feed
    FEED_PAGE_SIZE = int(os.getenv("FEED_PAGE_SIZE", "50"))

    # Observability
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

    # Logging
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
