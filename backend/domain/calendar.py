"""Capacity-bounded vacation calendar: date -> location -> occupants."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, Optional

from backend.domain.models import Bid


class CalendarInvariantError(Exception):
    """Raised when a mutation would break a calendar invariant."""


class SlotCapacityError(CalendarInvariantError):
    """Raised when seating into a slot that is already full."""


class DuplicateOccupantError(CalendarInvariantError):
    """Raised when a requester would occupy the same slot twice."""


class DateOutsideCalendarError(CalendarInvariantError):
    """Raised when a date does not belong to the calendar's year."""


class VacationCalendar:
    """Occupancy for every (date, location) slot of one allocation year.

    Invariants:
        - len(slot) <= capacity for every slot
        - no requester_id appears twice in a slot
    Reading a slot never creates it; only ``seat`` does.
    """

    def __init__(self, year: int, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.year = year
        self.capacity = capacity
        self._slots: dict[date, dict[str, list[Bid]]] = {}

    def days(self) -> Iterator[date]:
        current = date(self.year, 1, 1)
        while current.year == self.year:
            yield current
            current += timedelta(days=1)

    def covers(self, day: date) -> bool:
        return day.year == self.year

    def _require_day(self, day: date) -> None:
        if not self.covers(day):
            raise DateOutsideCalendarError(
                f"{day.isoformat()} is outside allocation year {self.year}"
            )

    def _slot(self, day: date, location: str) -> list[Bid]:
        return self._slots.get(day, {}).get(location, [])

    def occupants(self, day: date, location: str) -> list[Bid]:
        return list(self._slot(day, location))

    def holds(self, day: date, location: str, requester_id: str) -> bool:
        return any(bid.requester_id == requester_id for bid in self._slot(day, location))

    def has_room(self, day: date, location: str) -> bool:
        return len(self._slot(day, location)) < self.capacity

    def is_full(self, day: date, location: str) -> bool:
        return not self.has_room(day, location)

    def seat(self, day: date, bid: Bid) -> None:
        self._require_day(day)
        if self.holds(day, bid.location, bid.requester_id):
            raise DuplicateOccupantError(
                f"{bid.requester_id!r} already holds {day.isoformat()} at {bid.location!r}"
            )
        if self.is_full(day, bid.location):
            raise SlotCapacityError(
                f"{day.isoformat()} at {bid.location!r} is at capacity {self.capacity}"
            )
        self._slots.setdefault(day, {}).setdefault(bid.location, []).append(bid)

    def replace(self, day: date, location: str, index: int, bid: Bid) -> Bid:
        """Swap the occupant at ``index`` for ``bid``; return the displaced one."""
        self._require_day(day)
        slot = self._slots.get(day, {}).get(location)
        if not slot:
            raise CalendarInvariantError(
                f"no occupants to replace on {day.isoformat()} at {location!r}"
            )
        if bid.location != location:
            raise CalendarInvariantError(
                f"bid for {bid.location!r} cannot sit in a {location!r} slot"
            )
        if any(
            occupant.requester_id == bid.requester_id
            for position, occupant in enumerate(slot)
            if position != index
        ):
            raise DuplicateOccupantError(
                f"{bid.requester_id!r} already holds {day.isoformat()} at {location!r}"
            )
        displaced = slot[index]
        slot[index] = bid
        return displaced

    def locations(self) -> set[str]:
        return {location for by_location in self._slots.values() for location in by_location}

    def to_mapping(self) -> dict[str, Optional[dict[str, list[Bid]]]]:
        """Full-year view keyed by ISO date; ``None`` for days nobody holds."""
        result: dict[str, Optional[dict[str, list[Bid]]]] = {}
        for day in self.days():
            by_location = {
                location: list(slot)
                for location, slot in self._slots.get(day, {}).items()
                if slot
            }
            result[day.isoformat()] = by_location or None
        return result
