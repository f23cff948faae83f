"""Startup validation: catch misconfigurations before the app serves traffic."""
from __future__ import annotations

import logging
import sys

from config.settings import settings, DEFAULT_JWT_SECRET

logger = logging.getLogger(__name__)


def validate_settings() -> list[str]:
    """Validate configuration. Returns list of warnings (empty = all good).

    Raises SystemExit for critical misconfigurations in production.
    """
    warnings: list[str] = []
    is_prod = settings.DATABASE_URL and "sqlite" not in settings.DATABASE_URL

    # Critical: tokens from the auth provider can't be trusted with the dev secret
    if is_prod and settings.JWT_SECRET == DEFAULT_JWT_SECRET:
        logger.critical("JWT_SECRET is still the default! Set the auth provider's secret.")
        sys.exit(1)

    if is_prod and "*" in settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS is set to *: restrict in production")

    if not settings.ADMIN_API_KEY:
        warnings.append("ADMIN_API_KEY not set: moderator report queue disabled")

    if settings.STORAGE_TIMEOUT_SECONDS <= 0:
        warnings.append("STORAGE_TIMEOUT_SECONDS must be positive: storage calls may hang")

    for w in warnings:
        logger.warning("%s", w)

    if not warnings:
        logger.info("All startup checks passed")

    return warnings
