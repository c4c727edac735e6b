"""Year-level allocation orchestration over the persisted bid set."""

from __future__ import annotations

from dataclasses import replace
from datetime import MAXYEAR, MINYEAR
from threading import RLock
from typing import Optional

from backend.domain.constraints import AllocationConfig, validate_allocation_config
from backend.domain.models import AllocationOutcome
from backend.repository.data_repository import DataRepository
from backend.services.allocation_engine import allocate, sort_by_seniority
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class AllocationValidationError(Exception):
    """Raised when an allocation run is requested with invalid inputs."""


def _validate_year(year: int) -> None:
    # The window scan needs Dec 31 and a following day to exist.
    if not MINYEAR <= year < MAXYEAR:
        raise AllocationValidationError(
            f"year must be between {MINYEAR} and {MAXYEAR - 1}"
        )


class VacationAllocationService:
    """Loads all bids, runs one allocation pass and writes back grants.

    A run holds the store lock from load to persist, so no submission can
    interleave with it.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        store_lock: Optional[RLock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._lock = store_lock or RLock()

    def _config(self, slot_capacity: Optional[int]) -> AllocationConfig:
        try:
            config = AllocationConfig.from_settings(self._settings)
            if slot_capacity is not None:
                config = replace(config, slot_capacity=slot_capacity)
            validate_allocation_config(config)
        except ValueError as exc:
            raise AllocationValidationError(str(exc)) from exc
        return config

    def run_allocation(
        self,
        year: int,
        *,
        persist: bool = True,
        slot_capacity: Optional[int] = None,
    ) -> AllocationOutcome:
        _validate_year(year)
        config = self._config(slot_capacity)

        with self._lock:
            bids = sort_by_seniority(self._repository.list_bids())
            logger.info(
                "Allocation started | year=%s | bids=%s | capacity=%s | persist=%s",
                year,
                len(bids),
                config.slot_capacity,
                persist,
            )
            outcome = allocate(bids, year, config)

            if persist:
                self._repository.replace_bids(
                    outcome.bids,
                    year=year,
                    grant_count=outcome.ledger.grant_count(),
                    unaccommodated_count=len(outcome.unaccommodated),
                )

        logger.info(
            "Allocation completed | year=%s | grants=%s | unaccommodated=%s",
            year,
            outcome.ledger.grant_count(),
            len(outcome.unaccommodated),
        )
        return outcome
