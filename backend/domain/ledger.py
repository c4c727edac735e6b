"""Grant ledger: requester -> location -> granted dates."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

from backend.domain.models import Bid


class GrantLedger:
    """Grants in the order they occurred, scoped to one allocation run."""

    def __init__(self) -> None:
        self._grants: dict[str, dict[str, list[date]]] = defaultdict(dict)

    def record(self, bid: Bid, day: date) -> None:
        self._grants[bid.requester_id].setdefault(bid.location, []).append(day)

    def revoke(self, bid: Bid, day: date) -> None:
        """Drop a grant that a bump took away."""
        granted = self._grants.get(bid.requester_id, {}).get(bid.location)
        if not granted or day not in granted:
            raise KeyError(
                f"no grant of {day.isoformat()} for {bid.requester_id!r} at {bid.location!r}"
            )
        granted.remove(day)

    def granted_dates(self, requester_id: str, location: str) -> list[date]:
        return list(self._grants.get(requester_id, {}).get(location, []))

    def grant_count(self) -> int:
        return sum(
            len(days)
            for by_location in self._grants.values()
            for days in by_location.values()
        )

    def materialize(self, bids: Iterable[Bid]) -> list[Bid]:
        """Replace each bid's requested dates with what it was granted."""
        return [
            bid.with_dates(self.granted_dates(bid.requester_id, bid.location))
            for bid in bids
        ]
