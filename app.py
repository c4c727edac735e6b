"""
app.py - FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the bid store, the ingestion and allocation services, registers
routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from threading import RLock
from typing import Optional

from fastapi import FastAPI

from backend.controllers.allocation_controller import router as allocation_router
from backend.controllers.bid_controller import router as bid_router
from backend.repository.data_repository import DataRepository
from backend.services.allocation_service import VacationAllocationService
from backend.services.bid_service import BidSubmissionService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are attached to app.state; both share one lock so a running
    allocation and an incoming bid never touch the store at the same time.
    """
    settings = settings or get_settings()

    repository = DataRepository(settings)
    store_lock = RLock()
    bid_service = BidSubmissionService(
        repository=repository,
        settings=settings,
        store_lock=store_lock,
    )
    allocation_service = VacationAllocationService(
        repository=repository,
        settings=settings,
        store_lock=store_lock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, settings)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(bid_router)
    app.include_router(allocation_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.state.repository = repository
    app.state.bid_service = bid_service
    app.state.allocation_service = allocation_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Schema must exist before the optional demo seed.
    """
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_bids:
        logger.info("Startup: seeding demo bids (skipped if Bids table not empty)")
        repository.seed_demo_bids_if_empty()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
