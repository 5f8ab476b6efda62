"""
Runtime settings read from environment variables.

Every reader falls back to a default so the API can start with an empty
environment (asyncpg then picks up the libpq `PG*` variables on its own).
"""

from __future__ import annotations

import os

DEFAULT_ALLOWED_ORIGINS = ("https://acme-services.vercel.app",)


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


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def database_url() -> str | None:
    return _env_str("DATABASE_URL") or None


def pool_min_size() -> int:
    return max(0, _env_int("DB_POOL_MIN_SIZE", 1))


def pool_max_size() -> int:
    return max(1, _env_int("DB_POOL_MAX_SIZE", 10))


def pool_idle_timeout_s() -> float:
    return _env_float("DB_IDLE_TIMEOUT_S", 30.0)


def pool_connect_timeout_s() -> float:
    return _env_float("DB_CONNECT_TIMEOUT_S", 2.0)


def command_timeout_s() -> float:
    return _env_float("DB_COMMAND_TIMEOUT_S", 30.0)


def cors_allowed_origins() -> list[str]:
    raw = _env_str("CORS_ALLOWED_ORIGINS")
    if not raw:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]


def environment() -> str:
    return _env_str("APP_ENV", "development").lower()


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def host() -> str:
    return _env_str("HOST", "0.0.0.0")


def port() -> int:
    return _env_int("PORT", 5000)
