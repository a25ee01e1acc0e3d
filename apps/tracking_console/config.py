"""Tracking console configuration.

Every setting is read once from the environment at import time. Tests patch
the module attributes with ``monkeypatch.setattr(config, ...)``.
"""

from __future__ import annotations

import logging
import os

from libs.common.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


def _env_float(name: str, default: str, *, minimum: float) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number (got {raw!r})") from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum} (got {value})")
    return value


# =============================================================================
# Server settings
# =============================================================================

HOST = os.getenv("TRACKING_CONSOLE_HOST", "0.0.0.0")
PORT = int(os.getenv("TRACKING_CONSOLE_PORT", "8080"))
DEBUG = _env_bool("TRACKING_CONSOLE_DEBUG", "false")
PAGE_TITLE = os.getenv("TRACKING_CONSOLE_PAGE_TITLE", "GPS Tracking - Admin Console")
STORAGE_SECRET = os.getenv("STORAGE_SECRET", "tracking-console-dev-secret")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

if STORAGE_SECRET == "tracking-console-dev-secret" and not DEBUG:
    logger.warning("STORAGE_SECRET is not set; using the development default.")

# =============================================================================
# Backend endpoint
# =============================================================================

TRACCAR_API_URL = os.getenv("TRACCAR_API_URL", "http://localhost:8082/api").rstrip("/")
HTTP_TIMEOUT_SECONDS = _env_float("HTTP_TIMEOUT_SECONDS", "10", minimum=0.1)

# =============================================================================
# Token storage
# =============================================================================

TOKEN_STORAGE_BACKEND = os.getenv("TOKEN_STORAGE_BACKEND", "app").lower()
if TOKEN_STORAGE_BACKEND not in {"app", "redis"}:
    raise ConfigurationError("TOKEN_STORAGE_BACKEND must be one of: app, redis")

TOKEN_STORAGE_KEY = os.getenv("TOKEN_STORAGE_KEY", "traccar_token")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/1")
# 0 disables expiry; the backend decides when a session ends.
TOKEN_TTL_SECONDS = int(os.getenv("TOKEN_TTL_SECONDS", "0"))

# =============================================================================
# Refresh intervals (seconds)
# =============================================================================

DEVICE_REFRESH_SECONDS = _env_float("DEVICE_REFRESH_SECONDS", "60", minimum=1.0)
POSITION_REFRESH_SECONDS = _env_float("POSITION_REFRESH_SECONDS", "30", minimum=1.0)
SERVER_STATS_REFRESH_SECONDS = _env_float("SERVER_STATS_REFRESH_SECONDS", "30", minimum=1.0)

# =============================================================================
# Live map
# =============================================================================

MAP_WIDTH = _env_float("MAP_WIDTH", "960", minimum=1.0)
MAP_HEIGHT = _env_float("MAP_HEIGHT", "500", minimum=1.0)
