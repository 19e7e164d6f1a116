"""Booking workflow: availability check, contact resolution, CRM deal creation."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from booking_backend.domain.catalog import RoomCatalog
from booking_backend.domain.errors import (
    RoomUnavailableError,
    StayValidationError,
)
from booking_backend.domain.models import BookingConfirmation, BookingRequest, StayRequest
from booking_backend.repository.booking_gateway import CrmBookingGateway
from booking_backend.repository.room_directory import RoomDirectory
from booking_backend.services.availability_service import (
    AvailabilityService,
    severity_for,
    validate_stay_range,
)
from booking_backend.services.pricing_service import PricingService
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)


class BookingService:
    """Creates a CRM booking once the room is confirmed free.

    Nothing serializes two concurrent bookings of the same room; the CRM is
    the system of record.
    """

    def __init__(
        self,
        availability_service: AvailabilityService,
        pricing_service: PricingService,
        room_directory: RoomDirectory,
        gateway: CrmBookingGateway,
        catalog: Optional[RoomCatalog] = None,
    ) -> None:
        self._availability_service = availability_service
        self._pricing_service = pricing_service
        self._room_directory = room_directory
        self._gateway = gateway
        self._catalog = catalog or RoomCatalog()

    async def create_booking(self, request: BookingRequest) -> BookingConfirmation:
        try:
            if not request.room_id or not request.room_type_id:
                raise StayValidationError("room_id and room_type_id are required")
            if not request.contact_name or not request.contact_phone:
                raise StayValidationError("contact_name and contact_phone are required")
            check_in, check_out = validate_stay_range(request.check_in, request.check_out)
        except StayValidationError as exc:
            log_failure(logger, "BookingService.create_booking", exc, severity_for(exc))
            raise

        availability = await self._availability_service.check_availability(
            StayRequest(
                room_type_id=request.room_type_id,
                check_in=check_in,
                check_out=check_out,
                room_id=request.room_id,
            )
        )
        if not availability.available:
            error = RoomUnavailableError("Номер занят на выбранные даты")
            log_failure(logger, "BookingService.create_booking", error, "WARNING")
            raise error

        total_cost = Decimal("0")
        if self._catalog.is_priced(request.room_type_id):
            pricing = await self._pricing_service.calculate_price(
                request.room_id,
                request.room_type_id,
                check_in,
                check_out,
            )
            total_cost = pricing.total

        rooms = await self._room_directory.list_rooms(request.room_type_id)
        room_name = next(
            (room.name for room in rooms if room.room_id == request.room_id),
            request.room_id,
        )

        contact_id = await self._gateway.find_contact_id(request.contact_phone)
        if contact_id is None:
            contact_id = await self._gateway.create_contact(
                request.contact_name,
                request.contact_phone,
            )

        booking_id = await self._gateway.create_booking_deal(
            room_type_id=request.room_type_id,
            room_id=request.room_id,
            room_name=room_name,
            check_in=check_in,
            check_out=check_out,
            contact_id=contact_id,
            comments=request.comments,
            total_cost=total_cost,
        )
        return BookingConfirmation(
            booking_id=booking_id,
            contact_id=contact_id,
            total_cost=total_cost,
        )
