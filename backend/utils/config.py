"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration.

    Backfill bounds are ``MM-DD`` strings applied to the year being allocated.
    """

    app_name: str = "Vacation Bid Allocator"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    engine_log_level: Optional[str] = None
    database_path: Path = Path("data") / "vacation_bids.db"
    slot_capacity: int = 3
    backfill_window_start: str = "11-15"
    backfill_window_end: str = "12-31"
    max_dates_per_bid: int = 14
    default_allocation_year: int = 2026
    seed_demo_bids: bool = False
    date_regex: str = r"^\d{4}-\d{2}-\d{2}$"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests call ``get_settings.cache_clear()``."""
    defaults = Settings()
    return Settings(
        app_name=os.getenv("VACATION_APP_NAME", defaults.app_name),
        app_version=os.getenv("VACATION_APP_VERSION", defaults.app_version),
        log_level=os.getenv("VACATION_LOG_LEVEL", defaults.log_level),
        engine_log_level=os.getenv("VACATION_ENGINE_LOG_LEVEL") or None,
        database_path=Path(os.getenv("VACATION_DATABASE_PATH", str(defaults.database_path))),
        slot_capacity=_env_int("VACATION_SLOT_CAPACITY", defaults.slot_capacity),
        backfill_window_start=os.getenv(
            "VACATION_BACKFILL_START", defaults.backfill_window_start
        ),
        backfill_window_end=os.getenv("VACATION_BACKFILL_END", defaults.backfill_window_end),
        max_dates_per_bid=_env_int("VACATION_MAX_DATES_PER_BID", defaults.max_dates_per_bid),
        default_allocation_year=_env_int(
            "VACATION_DEFAULT_YEAR", defaults.default_allocation_year
        ),
        seed_demo_bids=_env_bool("VACATION_SEED_DEMO_BIDS", defaults.seed_demo_bids),
    )
