"""HTTP controller layer for room calendars, availability and pricing."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from booking_backend.controllers.dependencies import (
    get_availability_service,
    get_catalog,
    get_occupancy_service,
    get_pricing_service,
    to_http_exception,
)
from booking_backend.domain.catalog import RoomCatalog
from booking_backend.domain.errors import BookingEngineError
from booking_backend.domain.models import StayRequest
from booking_backend.services.availability_service import AvailabilityService
from booking_backend.services.occupancy_service import RoomOccupancyService
from booking_backend.services.pricing_service import PricingService
from booking_backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["rooms"])


class StayPayload(BaseModel):
    """Input DTO shared by availability and pricing endpoints."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    room_id: Optional[str] = Field(default=None, alias="roomId")
    room_type: str = Field(alias="roomType", min_length=1)
    check_in: date = Field(alias="checkIn")
    check_out: date = Field(alias="checkOut")


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    available: bool
    room_id: Optional[str] = Field(default=None, alias="roomId")
    occupancy: dict[date, float] = Field(default_factory=dict)


class NightlyRateResponse(BaseModel):
    night: date
    rate: Decimal = Field(ge=0)
    occupied: bool


class PriceResponse(BaseModel):
    total: Decimal = Field(ge=0)
    nights: int = Field(gt=0)
    nights_detail: list[NightlyRateResponse]


class OccupiedDateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deal_id: str
    check_in: date = Field(alias="checkIn")
    check_out: date = Field(alias="checkOut")
    comments: str


class RoomInfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    number: str
    category_field: str = Field(alias="categoryField")
    occupied_dates: list[OccupiedDateResponse] = Field(alias="occupiedDates")


class RoomsInfoResponse(BaseModel):
    rooms: list[RoomInfoResponse]


class RoomCategoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    alias: str
    field_code: str = Field(alias="fieldCode")
    name: str
    priced: bool


@router.get(
    "/rooms/",
    response_model=RoomsInfoResponse,
    status_code=status.HTTP_200_OK,
)
async def get_rooms_info(
    year: int = Query(ge=1),
    month: int = Query(ge=1, le=12),
    category: str = Query(min_length=1),
    service: RoomOccupancyService = Depends(get_occupancy_service),
) -> RoomsInfoResponse:
    """Monthly occupancy calendar of every room in the category."""
    try:
        entries = await service.get_rooms_info(year, month, category)
    except BookingEngineError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected calendar failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch rooms information",
        ) from exc
    return RoomsInfoResponse(
        rooms=[
            RoomInfoResponse(
                id=entry.room_id,
                number=entry.name,
                category_field=entry.room_type_id,
                occupied_dates=[
                    OccupiedDateResponse(
                        deal_id=item.reservation_id,
                        check_in=item.check_in,
                        check_out=item.check_out,
                        comments=item.comments,
                    )
                    for item in entry.occupied_ranges
                ],
            )
            for entry in entries
        ]
    )


@router.post(
    "/rooms/check-availability",
    response_model=AvailabilityResponse,
    status_code=status.HTTP_200_OK,
)
async def check_availability(
    payload: StayPayload,
    service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        result = await service.check_availability(
            StayRequest(
                room_type_id=payload.room_type,
                check_in=payload.check_in,
                check_out=payload.check_out,
                room_id=payload.room_id,
            ),
            include_occupancy=True,
        )
    except BookingEngineError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected availability failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check room availability",
        ) from exc
    return AvailabilityResponse(
        available=result.available,
        room_id=result.room_id,
        occupancy=result.occupancy,
    )


@router.post(
    "/rooms/price",
    response_model=PriceResponse,
    status_code=status.HTTP_200_OK,
)
async def calculate_price(
    payload: StayPayload,
    service: PricingService = Depends(get_pricing_service),
) -> PriceResponse:
    try:
        result = await service.calculate_price(
            payload.room_id,
            payload.room_type,
            payload.check_in,
            payload.check_out,
        )
    except BookingEngineError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected pricing failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to calculate price",
        ) from exc
    return PriceResponse(
        total=result.total,
        nights=result.nights,
        nights_detail=[
            NightlyRateResponse(night=item.night, rate=item.rate, occupied=item.occupied)
            for item in result.nightly_rates
        ],
    )


@router.get(
    "/room-categories",
    response_model=list[RoomCategoryResponse],
    status_code=status.HTTP_200_OK,
)
async def list_room_categories(
    catalog: RoomCatalog = Depends(get_catalog),
) -> list[RoomCategoryResponse]:
    return [
        RoomCategoryResponse(
            alias=category.alias,
            field_code=category.field_code,
            name=category.display_name,
            priced=catalog.is_priced(category.field_code),
        )
        for category in catalog.categories
    ]
