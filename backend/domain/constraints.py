"""Domain-level rules for slot capacity and the backfill window."""

from __future__ import annotations

from calendar import isleap
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from backend.utils.config import Settings


MonthDay = tuple[int, int]

DEFAULT_SLOT_CAPACITY = 3
DEFAULT_BACKFILL_START: MonthDay = (11, 15)
DEFAULT_BACKFILL_END: MonthDay = (12, 31)


def parse_month_day(value: str) -> MonthDay:
    """Parse an ``MM-DD`` string into a (month, day) pair."""
    parts = value.strip().split("-")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ValueError(f"month-day must follow MM-DD format, got {value!r}")
    month, day = (int(part) for part in parts)
    _check_month_day((month, day), "month-day")
    return month, day


def _check_month_day(value: MonthDay, name: str) -> None:
    month, day = value
    try:
        # 2000 is a leap year, so Feb 29 is accepted here and clamped per year.
        date(2000, month, day)
    except ValueError as exc:
        raise ValueError(f"{name} {value!r} is not a calendar month/day") from exc


@dataclass(frozen=True)
class AllocationConfig:
    slot_capacity: int = DEFAULT_SLOT_CAPACITY
    backfill_start: MonthDay = DEFAULT_BACKFILL_START
    backfill_end: MonthDay = DEFAULT_BACKFILL_END

    @classmethod
    def from_settings(cls, settings: Settings) -> AllocationConfig:
        return cls(
            slot_capacity=settings.slot_capacity,
            backfill_start=parse_month_day(settings.backfill_window_start),
            backfill_end=parse_month_day(settings.backfill_window_end),
        )


def validate_allocation_config(config: AllocationConfig) -> None:
    if config.slot_capacity < 1:
        raise ValueError("slot_capacity must be >= 1")
    _check_month_day(config.backfill_start, "backfill_start")
    _check_month_day(config.backfill_end, "backfill_end")
    if config.backfill_start > config.backfill_end:
        raise ValueError("backfill_start must not fall after backfill_end")


def _resolve(year: int, month_day: MonthDay) -> date:
    month, day = month_day
    if (month, day) == (2, 29) and not isleap(year):
        day = 28
    return date(year, month, day)


def backfill_window(config: AllocationConfig, year: int) -> list[date]:
    """Dates scanned by backfill, ascending, both bounds inclusive.

    The window never leaves ``year``.
    """
    current = _resolve(year, config.backfill_start)
    end = _resolve(year, config.backfill_end)
    days: list[date] = []
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days
