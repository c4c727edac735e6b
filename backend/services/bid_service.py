"""Bid ingestion: normalization, validation and last-submission-wins storage."""

from __future__ import annotations

import re
from datetime import date
from threading import RLock
from typing import Optional, Sequence

from backend.domain.models import Bid
from backend.repository.data_repository import DataRepository
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class BidValidationError(Exception):
    """Raised when a bid submission is malformed."""


def normalize_dates(raw_dates: Sequence[str]) -> list[str]:
    """Trim and deduplicate date strings, keeping first occurrences in order."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for raw in raw_dates:
        value = raw.strip()
        if value in seen:
            continue
        seen.add(value)
        cleaned.append(value)
    return cleaned


def _parse_dates(values: Sequence[str], pattern: str) -> tuple[date, ...]:
    parsed: list[date] = []
    for value in values:
        try:
            if not re.fullmatch(pattern, value):
                raise ValueError(value)
            parsed.append(date.fromisoformat(value))
        except ValueError as exc:
            raise BidValidationError(
                f"vacation date {value!r} must follow YYYY-MM-DD format"
            ) from exc
    return tuple(parsed)


class BidSubmissionService:
    """Accepts bids from requesters and answers "what do I have" queries."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        store_lock: Optional[RLock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._lock = store_lock or RLock()

    def submit_bid(
        self,
        *,
        requester_id: str,
        name: str,
        seniority: int,
        location: str,
        vacation_dates: Sequence[str],
    ) -> Bid:
        if not requester_id.strip() or not location.strip():
            raise BidValidationError("requester_id and location are required")
        cleaned = normalize_dates(vacation_dates)
        if not cleaned:
            raise BidValidationError("You must select at least one vacation date.")
        if len(cleaned) > self._settings.max_dates_per_bid:
            raise BidValidationError(
                f"You can only request up to {self._settings.max_dates_per_bid} vacation dates."
            )

        bid = Bid(
            requester_id=requester_id.strip(),
            display_name=name,
            seniority=seniority,
            location=location.strip(),
            requested_dates=_parse_dates(cleaned, self._settings.date_regex),
        )
        with self._lock:
            self._repository.upsert_bid(bid)
        logger.info(
            "Bid saved | requester_id=%s | location=%s | dates=%s",
            bid.requester_id,
            bid.location,
            len(bid.requested_dates),
        )
        return bid

    def get_vacation_dates(self, requester_id: str, location: str) -> list[str]:
        """Stored dates for the pair: requests before a run, grants after."""
        bid = self._repository.get_bid(requester_id, location)
        if bid is None:
            return []
        return [day.isoformat() for day in bid.requested_dates]

    def list_bids(self) -> list[Bid]:
        return self._repository.list_bids()
