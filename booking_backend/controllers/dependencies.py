"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from booking_backend.domain.catalog import RoomCatalog
from booking_backend.domain.errors import (
    BookingEngineError,
    CategoryNotFoundError,
    CollaboratorError,
    CollaboratorTimeoutError,
    RoomUnavailableError,
    StayValidationError,
)
from booking_backend.services.availability_service import AvailabilityService
from booking_backend.services.booking_service import BookingService
from booking_backend.services.occupancy_service import RoomOccupancyService
from booking_backend.services.pricing_service import PricingService


def _state_service(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_availability_service(request: Request) -> AvailabilityService:
    return _state_service(request, "availability_service", "Availability service")


def get_pricing_service(request: Request) -> PricingService:
    return _state_service(request, "pricing_service", "Pricing service")


def get_occupancy_service(request: Request) -> RoomOccupancyService:
    return _state_service(request, "occupancy_service", "Occupancy service")


def get_booking_service(request: Request) -> BookingService:
    return _state_service(request, "booking_service", "Booking service")


def get_catalog(request: Request) -> RoomCatalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        catalog = RoomCatalog()
        request.app.state.catalog = catalog
    return catalog


def to_http_exception(exc: BookingEngineError) -> HTTPException:
    """Map engine failures onto HTTP status codes."""
    if isinstance(exc, StayValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, CategoryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, RoomUnavailableError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, CollaboratorTimeoutError):
        return HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="CRM did not respond in time, retry later",
        )
    if isinstance(exc, CollaboratorError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="CRM service unavailable",
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Server error",
    )
