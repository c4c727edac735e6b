from __future__ import annotations

from datetime import date, timedelta

import pytest

from backend.domain.constraints import AllocationConfig, backfill_window
from backend.domain.models import BACKFILL_EXHAUSTED, OUTSIDE_ALLOCATION_YEAR, Bid
from backend.services.allocation_engine import (
    AllocationRun,
    allocate,
    assign_date,
    backfill,
    least_senior_index,
    sort_by_seniority,
)


YEAR = 2026
JULY_4 = date(YEAR, 7, 4)
NOV_15 = date(YEAR, 11, 15)
NOV_16 = date(YEAR, 11, 16)
WINDOW = backfill_window(AllocationConfig(), YEAR)


def _bid(requester_id: str, seniority: int, *dates: date, location: str = "A") -> Bid:
    return Bid(requester_id, requester_id.title(), seniority, location, tuple(dates))


def _ids(outcome, day: date, location: str = "A") -> list[str]:
    return [bid.requester_id for bid in outcome.calendar.occupants(day, location)]


def _window_fillers(location: str = "A") -> list[Bid]:
    return [_bid(f"w{seniority}", seniority, *WINDOW, location=location) for seniority in (1, 2, 3)]


def test_reference_scenario_bump_and_backfill() -> None:
    bids = [_bid(f"s{seniority}", seniority, JULY_4) for seniority in (5, 3, 1, 9, 2)]

    outcome = allocate(bids, YEAR)

    assert _ids(outcome, JULY_4) == ["s2", "s3", "s1"]
    assert sorted(bid.seniority for bid in outcome.calendar.occupants(JULY_4, "A")) == [1, 2, 3]
    assert _ids(outcome, NOV_15) == ["s9", "s5"]
    assert outcome.ledger.granted_dates("s5", "A") == [NOV_15]
    assert outcome.ledger.granted_dates("s9", "A") == [NOV_15]
    assert outcome.ledger.granted_dates("s2", "A") == [JULY_4]
    assert outcome.unaccommodated == []

    materialized = {bid.requester_id: bid.requested_dates for bid in outcome.bids}
    assert materialized == {
        "s5": (NOV_15,),
        "s3": (JULY_4,),
        "s1": (JULY_4,),
        "s9": (NOV_15,),
        "s2": (JULY_4,),
    }


def test_least_senior_index_prefers_first_seated_on_ties() -> None:
    occupants = [_bid("a", 3), _bid("b", 9), _bid("c", 9), _bid("d", 1)]
    assert least_senior_index(occupants) == 1
    assert least_senior_index([_bid("a", 4)]) == 0
    assert least_senior_index([_bid("a", 4), _bid("b", 4), _bid("c", 4)]) == 0


def test_bump_displaces_earliest_of_tied_least_senior() -> None:
    bids = [
        _bid("a", 4, JULY_4),
        _bid("b", 7, JULY_4),
        _bid("c", 7, JULY_4),
        _bid("d", 2, JULY_4),
    ]

    outcome = allocate(bids, YEAR)

    assert _ids(outcome, JULY_4) == ["a", "d", "c"]
    assert _ids(outcome, NOV_15) == ["b"]


def test_equal_seniority_does_not_bump() -> None:
    bids = [_bid("a", 1, JULY_4), _bid("b", 2, JULY_4), _bid("c", 3, JULY_4), _bid("d", 3, JULY_4)]

    outcome = allocate(bids, YEAR)

    assert _ids(outcome, JULY_4) == ["a", "b", "c"]
    assert outcome.ledger.granted_dates("d", "A") == [NOV_15]


def test_repeated_date_in_one_bid_is_granted_once() -> None:
    outcome = allocate([_bid("a", 1, JULY_4, JULY_4)], YEAR)
    assert outcome.ledger.granted_dates("a", "A") == [JULY_4]
    assert _ids(outcome, JULY_4) == ["a"]


def test_backfilled_requester_rerequesting_window_date_is_noop() -> None:
    bids = [
        _bid("a", 1, JULY_4),
        _bid("b", 2, JULY_4),
        _bid("c", 3, JULY_4),
        _bid("x", 9, JULY_4, NOV_15),
    ]

    outcome = allocate(bids, YEAR)

    assert outcome.ledger.granted_dates("x", "A") == [NOV_15]
    assert _ids(outcome, NOV_15) == ["x"]


def test_backfill_skips_dates_the_requester_already_holds() -> None:
    bids = [
        _bid("a", 1, JULY_4),
        _bid("b", 2, JULY_4),
        _bid("c", 3, JULY_4),
        _bid("x", 9, NOV_15, JULY_4),
    ]

    outcome = allocate(bids, YEAR)

    assert outcome.ledger.granted_dates("x", "A") == [NOV_15, NOV_16]


def test_backfill_skips_full_window_dates() -> None:
    fillers = [_bid(f"f{seniority}", seniority, NOV_15) for seniority in (1, 2, 3)]
    seated = [_bid(f"j{seniority}", seniority, JULY_4) for seniority in (4, 5, 6)]
    late = _bid("late", 8, JULY_4)

    outcome = allocate(fillers + seated + [late], YEAR)

    assert outcome.ledger.granted_dates("late", "A") == [NOV_16]


def test_rejected_request_with_exhausted_window_gets_nothing() -> None:
    bids = _window_fillers() + [
        _bid("j1", 1, JULY_4),
        _bid("j2", 2, JULY_4),
        _bid("j3", 3, JULY_4),
        _bid("late", 4, JULY_4),
    ]

    outcome = allocate(bids, YEAR)

    assert outcome.ledger.granted_dates("late", "A") == []
    late = next(bid for bid in outcome.bids if bid.requester_id == "late")
    assert late.requested_dates == ()
    assert len(outcome.unaccommodated) == 1
    lost = outcome.unaccommodated[0]
    assert (lost.requester_id, lost.requested_date, lost.reason) == (
        "late",
        JULY_4,
        BACKFILL_EXHAUSTED,
    )


def test_bumped_occupant_with_exhausted_window_is_dropped() -> None:
    bids = _window_fillers() + [
        _bid("a", 5, JULY_4),
        _bid("b", 6, JULY_4),
        _bid("c", 7, JULY_4),
        _bid("d", 4, JULY_4),
    ]

    outcome = allocate(bids, YEAR)

    assert _ids(outcome, JULY_4) == ["a", "b", "d"]
    assert outcome.ledger.granted_dates("c", "A") == []
    assert [item.requester_id for item in outcome.unaccommodated] == ["c"]


def test_backfill_returns_none_without_raising() -> None:
    run = AllocationRun.start(YEAR, AllocationConfig(slot_capacity=1))
    for day in run.window:
        run.calendar.seat(day, _bid("holder", 1, day))

    assert backfill(run, _bid("x", 2, JULY_4), JULY_4) is None
    assert run.unaccommodated[0].reason == BACKFILL_EXHAUSTED


def test_dates_outside_allocation_year_are_reported() -> None:
    next_year = date(YEAR + 1, 1, 2)
    outcome = allocate([_bid("a", 1, next_year, JULY_4)], YEAR)

    assert outcome.ledger.granted_dates("a", "A") == [JULY_4]
    assert [(item.requested_date, item.reason) for item in outcome.unaccommodated] == [
        (next_year, OUTSIDE_ALLOCATION_YEAR)
    ]


def test_locations_have_independent_slots() -> None:
    bids = [_bid(f"a{seniority}", seniority, JULY_4, location="A") for seniority in (1, 2, 3)]
    bids.append(_bid("b1", 9, JULY_4, location="B"))

    outcome = allocate(bids, YEAR)

    assert _ids(outcome, JULY_4, "B") == ["b1"]
    assert outcome.calendar.occupants(NOV_15, "A") == []


def test_custom_capacity_and_window() -> None:
    config = AllocationConfig(slot_capacity=1, backfill_start=(12, 20), backfill_end=(12, 21))
    bids = [_bid("a", 1, JULY_4), _bid("b", 2, JULY_4), _bid("c", 3, JULY_4), _bid("d", 4, JULY_4)]

    outcome = allocate(bids, YEAR, config)

    assert _ids(outcome, JULY_4) == ["a"]
    assert outcome.ledger.granted_dates("b", "A") == [date(YEAR, 12, 20)]
    assert outcome.ledger.granted_dates("c", "A") == [date(YEAR, 12, 21)]
    assert outcome.ledger.granted_dates("d", "A") == []


def test_invalid_config_is_rejected_before_running() -> None:
    with pytest.raises(ValueError):
        allocate([_bid("a", 1, JULY_4)], YEAR, AllocationConfig(slot_capacity=0))


def test_assign_date_seats_directly_when_room() -> None:
    run = AllocationRun.start(YEAR)
    bid = _bid("a", 1, JULY_4)
    assign_date(run, bid, JULY_4)
    assign_date(run, bid, JULY_4)
    assert run.calendar.occupants(JULY_4, "A") == [bid]
    assert run.ledger.granted_dates("a", "A") == [JULY_4]


def test_runs_do_not_share_state() -> None:
    first = allocate([_bid("a", 1, JULY_4)], YEAR)
    second = allocate([_bid("b", 1, JULY_4)], YEAR)
    assert _ids(first, JULY_4) == ["a"]
    assert _ids(second, JULY_4) == ["b"]


def test_sort_by_seniority_is_stable() -> None:
    bids = [_bid("x", 3), _bid("y", 1), _bid("z", 3), _bid("w", 2)]
    assert [bid.requester_id for bid in sort_by_seniority(bids)] == ["y", "w", "x", "z"]


def test_sorted_input_never_bumps() -> None:
    bids = sort_by_seniority(
        [_bid(f"s{seniority}", seniority, JULY_4) for seniority in (5, 3, 1, 9, 2)]
    )

    outcome = allocate(bids, YEAR)

    assert _ids(outcome, JULY_4) == ["s1", "s2", "s3"]
    assert _ids(outcome, NOV_15) == ["s5", "s9"]


def test_window_is_scanned_in_calendar_order() -> None:
    assert WINDOW[1] - WINDOW[0] == timedelta(days=1)
    config = AllocationConfig(slot_capacity=1)
    bids = [_bid("a", 1, JULY_4)] + [_bid(f"r{index}", index + 2, JULY_4) for index in range(3)]

    outcome = allocate(bids, YEAR, config)

    assert [outcome.ledger.granted_dates(f"r{index}", "A") for index in range(3)] == [
        [WINDOW[0]],
        [WINDOW[1]],
        [WINDOW[2]],
    ]
