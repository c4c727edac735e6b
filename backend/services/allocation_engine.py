"""Seniority-priority vacation allocation with bump and backfill.

Bids are consumed in the order given. Each requested date is either seated,
seated by bumping a less senior occupant, or rejected. Bumped and rejected
requests go through ``backfill``, a first-fit forward scan of the backfill
window that only fills spare seats.

Cascade depth is exactly one: ``assign_date`` may call ``backfill``, and
``backfill`` never calls ``assign_date`` or bumps anyone. Allowing deeper
cascades means changing that contract, not just this call graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from backend.domain.calendar import VacationCalendar
from backend.domain.constraints import (
    AllocationConfig,
    backfill_window,
    validate_allocation_config,
)
from backend.domain.ledger import GrantLedger
from backend.domain.models import (
    BACKFILL_EXHAUSTED,
    OUTSIDE_ALLOCATION_YEAR,
    AllocationOutcome,
    Bid,
    UnaccommodatedRequest,
)
from backend.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class AllocationRun:
    """State owned by exactly one allocation pass."""

    year: int
    config: AllocationConfig
    calendar: VacationCalendar
    ledger: GrantLedger
    window: list[date]
    unaccommodated: list[UnaccommodatedRequest] = field(default_factory=list)

    @classmethod
    def start(cls, year: int, config: Optional[AllocationConfig] = None) -> AllocationRun:
        resolved = config or AllocationConfig()
        validate_allocation_config(resolved)
        return cls(
            year=year,
            config=resolved,
            calendar=VacationCalendar(year, resolved.slot_capacity),
            ledger=GrantLedger(),
            window=backfill_window(resolved, year),
        )


def least_senior_index(occupants: Sequence[Bid]) -> int:
    """Index of the occupant with the largest seniority value.

    Ties resolve to the earliest position so whoever was seated first stays.
    """
    worst_index = 0
    for index in range(1, len(occupants)):
        if occupants[index].seniority > occupants[worst_index].seniority:
            worst_index = index
    return worst_index


def backfill(run: AllocationRun, bid: Bid, displaced_from: date) -> Optional[date]:
    """Seat ``bid`` on the first window date with a spare seat.

    Returns the seated date, or ``None`` when the window is exhausted. An
    exhausted window is not an error: the request is recorded as
    unaccommodated and the run continues.
    """
    calendar = run.calendar
    for day in run.window:
        if calendar.has_room(day, bid.location) and not calendar.holds(
            day, bid.location, bid.requester_id
        ):
            calendar.seat(day, bid)
            run.ledger.record(bid, day)
            logger.debug(
                "Backfill seated | requester_id=%s | location=%s | from=%s | to=%s",
                bid.requester_id,
                bid.location,
                displaced_from.isoformat(),
                day.isoformat(),
            )
            return day

    run.unaccommodated.append(
        UnaccommodatedRequest(
            requester_id=bid.requester_id,
            location=bid.location,
            requested_date=displaced_from,
            reason=BACKFILL_EXHAUSTED,
        )
    )
    logger.warning(
        "Backfill window exhausted | requester_id=%s | location=%s | requested_date=%s",
        bid.requester_id,
        bid.location,
        displaced_from.isoformat(),
    )
    return None


def assign_date(run: AllocationRun, bid: Bid, day: date) -> None:
    """Apply the seat / bump / reject rule for one (bid, date) pair."""
    calendar = run.calendar
    if not calendar.covers(day):
        run.unaccommodated.append(
            UnaccommodatedRequest(
                requester_id=bid.requester_id,
                location=bid.location,
                requested_date=day,
                reason=OUTSIDE_ALLOCATION_YEAR,
            )
        )
        logger.info(
            "Requested date outside allocation year | requester_id=%s | date=%s | year=%s",
            bid.requester_id,
            day.isoformat(),
            run.year,
        )
        return

    if calendar.holds(day, bid.location, bid.requester_id):
        return

    if calendar.has_room(day, bid.location):
        calendar.seat(day, bid)
        run.ledger.record(bid, day)
        return

    occupants = calendar.occupants(day, bid.location)
    worst_index = least_senior_index(occupants)
    worst = occupants[worst_index]
    if bid.seniority < worst.seniority:
        bumped = calendar.replace(day, bid.location, worst_index, bid)
        # The bumped occupant loses this grant, unlike an append-only ledger, so
        # materialized bids always match the seats they hold.
        run.ledger.revoke(bumped, day)
        run.ledger.record(bid, day)
        logger.debug(
            "Bumped occupant | date=%s | location=%s | bumped=%s | by=%s",
            day.isoformat(),
            bid.location,
            bumped.requester_id,
            bid.requester_id,
        )
        backfill(run, bumped, day)
    else:
        backfill(run, bid, day)


def sort_by_seniority(bids: Iterable[Bid]) -> list[Bid]:
    """Most senior first; equal seniority keeps the incoming order."""
    return sorted(bids, key=lambda bid: bid.seniority)


def allocate(
    bids: Sequence[Bid],
    year: int,
    config: Optional[AllocationConfig] = None,
) -> AllocationOutcome:
    """Run one allocation pass over ``bids`` in the order given."""
    run = AllocationRun.start(year, config)
    for bid in bids:
        for day in bid.requested_dates:
            assign_date(run, bid, day)

    return AllocationOutcome(
        year=year,
        calendar=run.calendar,
        ledger=run.ledger,
        bids=run.ledger.materialize(bids),
        unaccommodated=list(run.unaccommodated),
    )
