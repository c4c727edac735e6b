from __future__ import annotations

from datetime import date

import pytest

from backend.domain.ledger import GrantLedger
from backend.domain.models import Bid


def _bid(requester_id: str, location: str = "A", *dates: date) -> Bid:
    return Bid(requester_id, requester_id, 1, location, tuple(dates))


def test_grants_keep_the_order_they_occurred() -> None:
    ledger = GrantLedger()
    bid = _bid("a")
    ledger.record(bid, date(2026, 12, 1))
    ledger.record(bid, date(2026, 3, 1))
    assert ledger.granted_dates("a", "A") == [date(2026, 12, 1), date(2026, 3, 1)]
    assert ledger.grant_count() == 2


def test_unknown_pair_defaults_to_no_grants() -> None:
    ledger = GrantLedger()
    ledger.record(_bid("a", "A"), date(2026, 1, 2))
    assert ledger.granted_dates("a", "B") == []
    assert ledger.granted_dates("zz", "A") == []


def test_revoke_removes_a_bumped_grant() -> None:
    ledger = GrantLedger()
    bid = _bid("a")
    ledger.record(bid, date(2026, 7, 4))
    ledger.record(bid, date(2026, 7, 5))
    ledger.revoke(bid, date(2026, 7, 4))
    assert ledger.granted_dates("a", "A") == [date(2026, 7, 5)]


def test_revoke_without_grant_raises() -> None:
    with pytest.raises(KeyError):
        GrantLedger().revoke(_bid("a"), date(2026, 7, 4))


def test_materialize_replaces_requested_dates() -> None:
    ledger = GrantLedger()
    granted = _bid("a", "A", date(2026, 7, 4), date(2026, 7, 5))
    empty = _bid("b", "A", date(2026, 7, 4))
    ledger.record(granted, date(2026, 11, 15))

    materialized = ledger.materialize([granted, empty])

    assert [bid.requester_id for bid in materialized] == ["a", "b"]
    assert materialized[0].requested_dates == (date(2026, 11, 15),)
    assert materialized[1].requested_dates == ()
    assert materialized[0].seniority == granted.seniority
