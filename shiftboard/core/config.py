# shiftboard/core/config.py
"""
Environment-driven configuration.

All values are read once at import time. Invalid values fail fast with a
RuntimeError so a misconfigured deployment never starts half-working.
"""

import os
from typing import Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shiftboard.core.constants import DEFAULT_UPCOMING_LIMIT

VERSION: Final[str] = "0.3.0"


def env_flag(name: str, default: str = "false") -> bool:
    """Read a boolean environment variable ("true" in any case is True)."""
    return os.getenv(name, default).strip().lower() == "true"


def env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read an integer environment variable, rejecting values below minimum."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}, got {value}")
    return value


def env_timezone(name: str, default: str) -> ZoneInfo:
    """Read an IANA timezone name from the environment."""
    key = os.getenv(name, default).strip() or default
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RuntimeError(f"{name} is not a known timezone: {key!r}") from e


# ==========================
# Runtime
# ==========================

#: Production toggles JSON logging, Sentry and strict CORS.
IS_PRODUCTION: Final[bool] = env_flag("PRODUCTION")

#: Where shifts come from: "static", "http" or "database".
SHIFT_SOURCE: Final[str] = os.getenv("SHIFT_SOURCE", "static").strip().lower()

#: Base URL of the JSON shift feed (SHIFT_SOURCE=http).
SHIFT_SOURCE_URL: Final[str] = os.getenv("SHIFT_SOURCE_URL", "").strip()

#: Timeout in seconds for the JSON shift feed.
SHIFT_FETCH_TIMEOUT: Final[int] = env_int("SHIFT_FETCH_TIMEOUT", 10, minimum=1)

#: SQLAlchemy URL for the read-only shift table (SHIFT_SOURCE=database).
DATABASE_URL: Final[str] = os.getenv("DATABASE_URL", "sqlite:///./shiftboard.db")

#: Timezone for calendar week and month boundaries.
TIMEZONE: Final[ZoneInfo] = env_timezone("SHIFTBOARD_TIMEZONE", "Europe/Paris")

#: Cap on the upcoming shift list.
UPCOMING_LIMIT: Final[int] = env_int("UPCOMING_LIMIT", DEFAULT_UPCOMING_LIMIT)

#: Seconds a dashboard session may sit unused before it is discarded.
SESSION_IDLE_TIMEOUT: Final[int] = env_int("SESSION_IDLE_TIMEOUT", 1800, minimum=1)

SHIFT_SOURCES: Final[tuple[str, ...]] = ("static", "http", "database")

if SHIFT_SOURCE not in SHIFT_SOURCES:
    raise RuntimeError(f"SHIFT_SOURCE must be one of {SHIFT_SOURCES}, got {SHIFT_SOURCE!r}")
