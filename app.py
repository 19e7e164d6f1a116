"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the CRM transport, repositories and services, registers routers,
and verifies the CRM connection config before serving requests.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from booking_backend.controllers.booking_controller import router as booking_router
from booking_backend.controllers.rooms_controller import router as rooms_router
from booking_backend.domain.catalog import RoomCatalog
from booking_backend.repository.booking_gateway import CrmBookingGateway
from booking_backend.repository.crm_transport import CrmTransport
from booking_backend.repository.reservation_repository import ReservationRepository
from booking_backend.repository.room_directory import RoomDirectory
from booking_backend.services.availability_service import AvailabilityService
from booking_backend.services.booking_service import BookingService
from booking_backend.services.occupancy_service import RoomOccupancyService
from booking_backend.services.pricing_service import PricingService
from booking_backend.utils.config import Settings, get_settings
from booking_backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[CrmTransport] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    No global singletons; every dependency is traceable from this function.
    """
    settings = settings or get_settings()
    catalog = RoomCatalog()

    # --- CRM transport (explicit config, verified at startup) ---
    transport = transport or CrmTransport(settings.crm_config())

    # --- Repositories (CRM reads and writes) ---
    reservation_repository = ReservationRepository(transport, catalog)
    room_directory = RoomDirectory(transport)
    booking_gateway = CrmBookingGateway(transport)

    # --- Services (business logic, no direct HTTP access) ---
    availability_service = AvailabilityService(
        repository=reservation_repository,
        room_directory=room_directory,
    )
    pricing_service = PricingService(
        repository=reservation_repository,
        catalog=catalog,
    )
    occupancy_service = RoomOccupancyService(
        repository=reservation_repository,
        room_directory=room_directory,
    )
    booking_service = BookingService(
        availability_service=availability_service,
        pricing_service=pricing_service,
        room_directory=room_directory,
        gateway=booking_gateway,
        catalog=catalog,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Verify the CRM config before accepting requests."""
        _startup(app)
        yield
        await app.state.transport.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(rooms_router, prefix=settings.api_prefix)
    app.include_router(booking_router, prefix=settings.api_prefix)

    # --- Inject services into app.state for dependency resolution ---
    app.state.catalog = catalog
    app.state.transport = transport
    app.state.availability_service = availability_service
    app.state.pricing_service = pricing_service
    app.state.occupancy_service = occupancy_service
    app.state.booking_service = booking_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Startup sequence. Safe to re-run on server restarts.

    A missing or undecryptable endpoint is fatal to every CRM call, so it
    fails here rather than on the first request.
    """
    transport: CrmTransport = app.state.transport

    logger.info("Startup: verifying CRM connection config")
    transport.verify()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
