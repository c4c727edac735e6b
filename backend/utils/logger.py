"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from backend.utils.config import get_settings


_LOGGER_INITIALIZED = False
ENGINE_LOGGER_NAME = "backend.services.allocation_engine"


def configure_logging(level: Optional[str] = None, engine_level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    Bid submissions, allocation runs and HTTP failures share one stdout
    format. The allocation engine logs each bump and backfill seat at DEBUG;
    ``engine_level`` (or ``VACATION_ENGINE_LOG_LEVEL``) lets operators trace
    those decisions without lowering the level of every other module.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )

    resolved_engine_level = engine_level or settings.engine_log_level
    if resolved_engine_level:
        logging.getLogger(ENGINE_LOGGER_NAME).setLevel(resolved_engine_level.upper())
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)
