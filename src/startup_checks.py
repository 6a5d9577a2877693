"""Startup validation — catch misconfigurations before the app serves traffic."""
from __future__ import annotations

import logging
import sys

from config.settings import settings

logger = logging.getLogger(__name__)


def validate_settings() -> list[str]:
    """Validate configuration. Returns list of warnings (empty = all good).

    Raises SystemExit for critical misconfigurations in production.
    """
    warnings: list[str] = []
    is_prod = settings.DATABASE_URL and "sqlite" not in settings.DATABASE_URL

    # Critical: moderation endpoints must not be reachable without a key in production
    if is_prod and not settings.ADMIN_API_KEY:
        logger.critical("ADMIN_API_KEY is not set! Refusing to start against a production database.")
        sys.exit(1)

    if not settings.ADMIN_API_KEY:
        warnings.append("ADMIN_API_KEY not set — moderation endpoints disabled")

    if is_prod and "*" in settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS is set to * — restrict in production")

    if settings.SERVER_ACCOUNT_ID < 1:
        warnings.append("SERVER_ACCOUNT_ID is not a valid account id — server blocklist ignored")

    if settings.ABUSES_DEFAULT_COUNT > settings.ABUSES_MAX_COUNT:
        warnings.append("ABUSES_DEFAULT_COUNT exceeds ABUSES_MAX_COUNT")

    for w in warnings:
        logger.warning("%s", w)

    if not warnings:
        logger.info("All startup checks passed")

    return warnings
