"""HTTP controller layer for bid submission and lookup."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import get_bid_service
from backend.domain.models import Bid
from backend.repository.data_repository import BidStoreError
from backend.services.bid_service import BidSubmissionService, BidValidationError
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["bids"])


class BidSubmissionRequest(BaseModel):
    """Input DTO; date normalization and the per-bid cap live in the service."""

    requester_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    seniority: int = Field(ge=1)
    location: str = Field(min_length=1)
    vacation_dates: list[str] = Field(min_length=1)


class BidRecordResponse(BaseModel):
    requester_id: str
    name: str
    seniority: int
    location: str
    vacation_dates: list[str]

    @classmethod
    def from_bid(cls, bid: Bid) -> BidRecordResponse:
        return cls(
            requester_id=bid.requester_id,
            name=bid.display_name,
            seniority=bid.seniority,
            location=bid.location,
            vacation_dates=[day.isoformat() for day in bid.requested_dates],
        )


class BidSubmissionResponse(BaseModel):
    message: str
    bid: BidRecordResponse


class VacationDatesResponse(BaseModel):
    requester_id: str
    location: str
    vacation_dates: list[str]


@router.post(
    "/bids",
    response_model=BidSubmissionResponse,
    status_code=status.HTTP_200_OK,
)
async def submit_bid(
    payload: BidSubmissionRequest,
    service: BidSubmissionService = Depends(get_bid_service),
) -> BidSubmissionResponse:
    try:
        bid = service.submit_bid(
            requester_id=payload.requester_id,
            name=payload.name,
            seniority=payload.seniority,
            location=payload.location,
            vacation_dates=payload.vacation_dates,
        )
    except BidValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except BidStoreError as exc:
        logger.exception("Bid store write failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save vacation request",
        ) from exc
    return BidSubmissionResponse(
        message="Vacation request saved.",
        bid=BidRecordResponse.from_bid(bid),
    )


@router.get("/bids", response_model=list[BidRecordResponse])
async def list_bids(
    service: BidSubmissionService = Depends(get_bid_service),
) -> list[BidRecordResponse]:
    try:
        return [BidRecordResponse.from_bid(bid) for bid in service.list_bids()]
    except BidStoreError as exc:
        logger.exception("Bid store read failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load vacation requests",
        ) from exc


@router.get("/bids/{location}/{requester_id}", response_model=VacationDatesResponse)
async def get_vacation_dates(
    location: str,
    requester_id: str,
    service: BidSubmissionService = Depends(get_bid_service),
) -> VacationDatesResponse:
    """Dates currently on file: requested before a run, granted after."""
    try:
        vacation_dates = service.get_vacation_dates(requester_id, location)
    except BidStoreError as exc:
        logger.exception("Bid store read failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load vacation dates",
        ) from exc
    return VacationDatesResponse(
        requester_id=requester_id,
        location=location,
        vacation_dates=vacation_dates,
    )
