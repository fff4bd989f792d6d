"""
LiveQuery configuration: all environment variables in one place.

Read from environment at import time. Never hardcode secrets.
"""

from __future__ import annotations

import os


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Client settings from environment variables."""

    # Remote API
    API_URL: str = os.environ.get("LIVEQUERY_API_URL", "http://localhost:8000").rstrip("/")
    TOKEN: str = os.environ.get("LIVEQUERY_TOKEN", "")
    TIMEOUT: float = _env_float("LIVEQUERY_TIMEOUT", 30.0)

    # Paging
    DEFAULT_LIMIT: int = _env_int("LIVEQUERY_DEFAULT_LIMIT", 10)

    # Realtime stream
    REALTIME_PATH: str = os.environ.get("LIVEQUERY_REALTIME_PATH", "/realtime")
    RECONNECT_DELAY: float = _env_float("LIVEQUERY_RECONNECT_DELAY", 2.0)

    # Reload on reconnect even when the last fetch failed
    RELOAD_AFTER_ERROR: bool = _env_bool("LIVEQUERY_RELOAD_AFTER_ERROR")

    @property
    def realtime_url(self) -> str:
        return f"{self.API_URL}/{self.REALTIME_PATH.lstrip('/')}"


# Singleton instance
settings = Settings()

if settings.DEFAULT_LIMIT < 1:
    raise RuntimeError("LIVEQUERY_DEFAULT_LIMIT must be at least 1")
if settings.TIMEOUT <= 0:
    raise RuntimeError("LIVEQUERY_TIMEOUT must be positive")
