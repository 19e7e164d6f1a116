"""Per-night stay pricing.

A night is charged at ``base_price * occupancy_multiplier`` when it already
falls inside a reservation of the same room (or of any room of the category
when no room is given) and at ``base_price`` otherwise.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from booking_backend.domain.catalog import RoomCatalog
from booking_backend.domain.errors import StayValidationError
from booking_backend.domain.intervals import iter_nights, night_overlaps, overlaps
from booking_backend.domain.models import NightlyRate, PricingResult
from booking_backend.repository.reservation_repository import ReservationRepository
from booking_backend.services.availability_service import (
    collect_stay_reservations,
    severity_for,
    validate_stay_range,
)
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)


class PricingService:
    def __init__(
        self,
        repository: ReservationRepository,
        catalog: Optional[RoomCatalog] = None,
    ) -> None:
        self._repository = repository
        self._catalog = catalog or RoomCatalog()

    async def calculate_price(
        self,
        room_id: Optional[str],
        room_type_id: str,
        check_in: Any,
        check_out: Any,
    ) -> PricingResult:
        try:
            if not room_type_id:
                raise StayValidationError("room_type_id is required")
            room_type = self._catalog.get_room_type(room_type_id)
            check_in_date, check_out_date = validate_stay_range(check_in, check_out)
        except StayValidationError as exc:
            log_failure(logger, "PricingService.calculate_price", exc, severity_for(exc))
            raise

        reservations = [
            reservation
            for reservation in await collect_stay_reservations(
                self._repository,
                room_type_id,
                check_in_date,
                check_out_date,
            )
            if (not room_id or reservation.room_id == str(room_id))
            and overlaps(
                check_in_date,
                check_out_date,
                reservation.check_in,
                reservation.check_out,
            )
        ]

        occupied_rate = room_type.base_price * room_type.occupancy_multiplier
        nightly_rates: list[NightlyRate] = []
        for night in iter_nights(check_in_date, check_out_date):
            occupied = any(
                night_overlaps(night, reservation.check_in, reservation.check_out)
                for reservation in reservations
            )
            nightly_rates.append(
                NightlyRate(
                    night=night,
                    rate=occupied_rate if occupied else room_type.base_price,
                    occupied=occupied,
                )
            )

        total = sum((item.rate for item in nightly_rates), Decimal("0"))
        return PricingResult(
            total=total,
            nights=len(nightly_rates),
            nightly_rates=tuple(nightly_rates),
        )
