"""Domain models for seniority-based vacation slot allocation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from backend.domain.calendar import VacationCalendar
    from backend.domain.ledger import GrantLedger


BACKFILL_EXHAUSTED = "backfill_exhausted"
OUTSIDE_ALLOCATION_YEAR = "outside_allocation_year"


@dataclass(frozen=True)
class Bid:
    """One requester's vacation request for one location.

    Lower ``seniority`` means higher priority. ``requested_dates`` order is
    the order the engine attempts them in.
    """

    requester_id: str
    display_name: str
    seniority: int
    location: str
    requested_dates: tuple[date, ...]

    def with_dates(self, dates: Iterable[date]) -> Bid:
        return replace(self, requested_dates=tuple(dates))


@dataclass(frozen=True)
class UnaccommodatedRequest:
    requester_id: str
    location: str
    requested_date: date
    reason: str


@dataclass(frozen=True)
class AllocationOutcome:
    year: int
    calendar: VacationCalendar
    ledger: GrantLedger
    bids: list[Bid]
    unaccommodated: list[UnaccommodatedRequest]
