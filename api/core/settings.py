"""
Environment-driven settings.

Everything is read lazily so tests can patch the environment per case.
"""

from __future__ import annotations

import os

DEFAULT_TRACKING_ID_PREFIX = "TEMU-CLAIM"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def database_url() -> str | None:
    # Missing URL is allowed; store-backed routes then answer 500.
    return _env_str("DATABASE_URL") or None


def db_pool_min_size() -> int:
    return max(_env_int("DB_POOL_MIN_SIZE", 1), 0)


def db_pool_max_size() -> int:
    return max(_env_int("DB_POOL_MAX_SIZE", 5), 1)


def db_command_timeout_s() -> int:
    return max(_env_int("DB_COMMAND_TIMEOUT_S", 30), 1)


def tracking_id_prefix() -> str:
    return _env_str("TRACKING_ID_PREFIX", DEFAULT_TRACKING_ID_PREFIX)


def cors_allow_origins() -> list[str]:
    raw = _env_str("CORS_ALLOW_ORIGINS")
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
