"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration shared by every layer."""

    app_name: str
    app_version: str
    log_level: str

    # Remote source of truth (server side)
    data_dir: Path
    host: str
    port: int
    admin_token: str | None

    # Client side synchronization
    snapshot_dir: Path
    local_storage_path: Path
    shared_storage_key: str
    remote_base_url: str
    remote_timeout_seconds: float
    poll_interval_seconds: float

    # Bookable day window
    day_start_hour: int
    day_end_hour: int
    slot_hours: int

    # Occupancy density buckets (upper bounds, exclusive)
    density_none_below: float
    density_light_below: float
    density_busy_below: float

    clock_regex: str = r"^([01]\d|2[0-4]):[0-5]\d$"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Resolve settings once per process; tests derive variants with `replace`."""
    data_dir = Path(_env_str("DATA_DIR", "var/ledger"))
    admin_token = os.getenv("ADMIN_TOKEN")
    return Settings(
        app_name=_env_str("APP_NAME", "Room Booking Ledger"),
        app_version=_env_str("APP_VERSION", "1.0.0"),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        data_dir=data_dir,
        host=_env_str("HOST", "127.0.0.1"),
        port=_env_int("PORT", 8000),
        admin_token=admin_token.strip() if admin_token and admin_token.strip() else None,
        snapshot_dir=Path(_env_str("SNAPSHOT_DIR", "data")),
        local_storage_path=Path(_env_str("LOCAL_STORAGE_PATH", "var/local_storage.db")),
        shared_storage_key=_env_str("SHARED_STORAGE_KEY", "requests"),
        remote_base_url=_env_str("REMOTE_BASE_URL", "http://127.0.0.1:8000"),
        remote_timeout_seconds=_env_float("REMOTE_TIMEOUT_SECONDS", 5.0),
        poll_interval_seconds=_env_float("POLL_INTERVAL_SECONDS", 30.0),
        day_start_hour=_env_int("DAY_START_HOUR", 7),
        day_end_hour=_env_int("DAY_END_HOUR", 18),
        slot_hours=_env_int("SLOT_HOURS", 1),
        density_none_below=_env_float("DENSITY_NONE_BELOW", 0.01),
        density_light_below=_env_float("DENSITY_LIGHT_BELOW", 0.40),
        density_busy_below=_env_float("DENSITY_BUSY_BELOW", 0.70),
    )
