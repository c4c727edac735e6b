"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from backend.services.allocation_service import VacationAllocationService
from backend.services.bid_service import BidSubmissionService


def get_bid_service(request: Request) -> BidSubmissionService:
    service = getattr(request.app.state, "bid_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Bid service is not initialized",
        )
    return service


def get_allocation_service(request: Request) -> VacationAllocationService:
    service = getattr(request.app.state, "allocation_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Allocation service is not initialized",
        )
    return service
