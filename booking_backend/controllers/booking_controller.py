"""HTTP controller layer for booking creation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from booking_backend.controllers.dependencies import get_booking_service, to_http_exception
from booking_backend.domain.errors import BookingEngineError
from booking_backend.domain.models import BookingRequest
from booking_backend.services.booking_service import BookingService
from booking_backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["booking"])


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    room_id: str = Field(alias="roomId", min_length=1)
    room_type: str = Field(alias="roomType", min_length=1)
    check_in: date = Field(alias="checkIn")
    check_out: date = Field(alias="checkOut")
    contact_name: str = Field(alias="contactName", min_length=1)
    contact_phone: str = Field(alias="contactPhone", min_length=1)
    comments: str = ""


class CreateBookingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: str = Field(alias="bookingId")
    contact_id: str = Field(alias="contactId")
    total_cost: Decimal = Field(alias="totalCost", ge=0)


@router.post(
    "/booking/create",
    response_model=CreateBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    payload: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
) -> CreateBookingResponse:
    """Check the room, resolve the contact and create the CRM deal."""
    try:
        confirmation = await service.create_booking(
            BookingRequest(
                room_id=payload.room_id,
                room_type_id=payload.room_type,
                check_in=payload.check_in,
                check_out=payload.check_out,
                contact_name=payload.contact_name,
                contact_phone=payload.contact_phone,
                comments=payload.comments,
            )
        )
    except BookingEngineError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected booking failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking",
        ) from exc
    return CreateBookingResponse(
        booking_id=confirmation.booking_id,
        contact_id=confirmation.contact_id,
        total_cost=confirmation.total_cost,
    )
