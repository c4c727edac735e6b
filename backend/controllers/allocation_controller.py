"""HTTP controller layer for yearly vacation allocation runs."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from backend.controllers.bid_controller import BidRecordResponse
from backend.controllers.dependencies import get_allocation_service
from backend.domain.models import AllocationOutcome
from backend.repository.data_repository import BidStoreError
from backend.services.allocation_service import (
    AllocationValidationError,
    VacationAllocationService,
)
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["allocation"])


class UnaccommodatedResponse(BaseModel):
    requester_id: str
    location: str
    requested_date: str
    reason: str


class AllocationRunResponse(BaseModel):
    """Full-year calendar: ISO date -> null or location -> ordered occupants."""

    year: int
    slot_capacity: int = Field(ge=1)
    calendar: dict[str, Optional[dict[str, list[BidRecordResponse]]]]
    grant_count: int = Field(ge=0)
    unaccommodated: list[UnaccommodatedResponse]


def _to_response(outcome: AllocationOutcome) -> AllocationRunResponse:
    calendar = {
        day: (
            None
            if by_location is None
            else {
                location: [BidRecordResponse.from_bid(bid) for bid in occupants]
                for location, occupants in by_location.items()
            }
        )
        for day, by_location in outcome.calendar.to_mapping().items()
    }
    return AllocationRunResponse(
        year=outcome.year,
        slot_capacity=outcome.calendar.capacity,
        calendar=calendar,
        grant_count=outcome.ledger.grant_count(),
        unaccommodated=[
            UnaccommodatedResponse(
                requester_id=item.requester_id,
                location=item.location,
                requested_date=item.requested_date.isoformat(),
                reason=item.reason,
            )
            for item in outcome.unaccommodated
        ],
    )


@router.post(
    "/allocations/{year}",
    response_model=AllocationRunResponse,
    status_code=status.HTTP_200_OK,
)
async def run_allocation(
    year: int,
    preview: bool = Query(default=False),
    slot_capacity: Optional[int] = Query(default=None, ge=1),
    service: VacationAllocationService = Depends(get_allocation_service),
) -> AllocationRunResponse:
    """Allocate the whole bid set for ``year``; ``preview`` skips write-back."""
    if slot_capacity is not None and not preview:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="slot_capacity overrides are only allowed with preview=true",
        )
    try:
        outcome = service.run_allocation(
            year,
            persist=not preview,
            slot_capacity=slot_capacity,
        )
    except AllocationValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except BidStoreError as exc:
        logger.exception("Bid store failure during allocation")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load or persist the bid set",
        ) from exc
    return _to_response(outcome)
