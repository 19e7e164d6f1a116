"""Room availability resolution against CRM reservations."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional

from booking_backend.domain.errors import (
    CategoryNotFoundError,
    StayValidationError,
)
from booking_backend.domain.intervals import iter_nights, months_spanned, night_overlaps, overlaps
from booking_backend.domain.models import AvailabilityResult, Reservation, StayRequest
from booking_backend.repository.reservation_repository import ReservationRepository
from booking_backend.repository.room_directory import RoomDirectory
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)


def parse_stay_date(value: Any, name: str) -> date:
    if value is None or value == "":
        raise StayValidationError(f"{name} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise StayValidationError(f"{name} must follow YYYY-MM-DD format") from exc
    raise StayValidationError(f"{name} must be a date")


def validate_stay_range(check_in: Any, check_out: Any) -> tuple[date, date]:
    check_in_date = parse_stay_date(check_in, "check_in")
    check_out_date = parse_stay_date(check_out, "check_out")
    if check_in_date >= check_out_date:
        raise StayValidationError("Check-out date must be after check-in date")
    return check_in_date, check_out_date


def severity_for(error: BaseException) -> str:
    return "WARNING" if isinstance(error, StayValidationError) else "ERROR"


async def collect_stay_reservations(
    repository: ReservationRepository,
    room_type_id: str,
    check_in: date,
    check_out: date,
) -> list[Reservation]:
    """Category reservations for every month the stay touches, one fetch per month."""
    seen: set[tuple[str, str, date, date]] = set()
    collected: list[Reservation] = []
    for year, month in months_spanned(check_in, check_out):
        grouped = await repository.fetch_month(year, month, room_type_id)
        category = grouped.get(room_type_id)
        if category is None:
            error = CategoryNotFoundError(
                f"Category {room_type_id} not found in reservations response"
            )
            log_failure(logger, "collect_stay_reservations", error)
            raise error
        for reservation in category.reservations:
            key = (
                reservation.reservation_id,
                reservation.room_id,
                reservation.check_in,
                reservation.check_out,
            )
            if key in seen:
                continue
            seen.add(key)
            collected.append(reservation)
    return collected


def is_room_free(
    room_id: str,
    room_type_id: str,
    check_in: date,
    check_out: date,
    reservations: Iterable[Reservation],
) -> bool:
    for reservation in reservations:
        if reservation.room_id != room_id or reservation.room_type_id != room_type_id:
            continue
        if overlaps(check_in, check_out, reservation.check_in, reservation.check_out):
            return False
    return True


def category_occupancy(
    room_ids: Iterable[str],
    room_type_id: str,
    check_in: date,
    check_out: date,
    reservations: Iterable[Reservation],
) -> dict[date, float]:
    """Share of the category's rooms taken on each night, as a percentage."""
    rooms = set(room_ids)
    category_reservations = [
        reservation
        for reservation in reservations
        if reservation.room_type_id == room_type_id and reservation.room_id in rooms
    ]
    occupancy: dict[date, float] = {}
    for night in iter_nights(check_in, check_out):
        taken = {
            reservation.room_id
            for reservation in category_reservations
            if night_overlaps(night, reservation.check_in, reservation.check_out)
        }
        occupancy[night] = round(100 * len(taken) / len(rooms), 2) if rooms else 0.0
    return occupancy


class AvailabilityService:
    """Finds a free room for a stay, first match in enumeration order."""

    def __init__(
        self,
        repository: ReservationRepository,
        room_directory: RoomDirectory,
    ) -> None:
        self._repository = repository
        self._room_directory = room_directory

    async def _category_room_ids(self, room_type_id: str) -> list[str]:
        rooms = await self._room_directory.list_rooms(room_type_id)
        return [room.room_id for room in rooms]

    async def check_availability(
        self,
        stay_request: StayRequest,
        include_occupancy: bool = False,
    ) -> AvailabilityResult:
        """Resolve a free room; ``include_occupancy`` adds the per-night category load."""
        try:
            if not stay_request.room_type_id:
                raise StayValidationError("room_type_id is required")
            check_in, check_out = validate_stay_range(
                stay_request.check_in,
                stay_request.check_out,
            )
        except StayValidationError as exc:
            log_failure(logger, "AvailabilityService.check_availability", exc, severity_for(exc))
            raise
        room_type_id = stay_request.room_type_id

        reservations = await collect_stay_reservations(
            self._repository,
            room_type_id,
            check_in,
            check_out,
        )
        category_rooms: Optional[list[str]] = None
        if include_occupancy or not stay_request.room_id:
            category_rooms = await self._category_room_ids(room_type_id)
        candidates = [str(stay_request.room_id)] if stay_request.room_id else category_rooms or []

        occupancy: dict[date, float] = {}
        if include_occupancy:
            occupancy = category_occupancy(
                category_rooms or [],
                room_type_id,
                check_in,
                check_out,
                reservations,
            )

        for room_id in candidates:
            if is_room_free(room_id, room_type_id, check_in, check_out, reservations):
                logger.info(
                    "Room %s/%s free for %s..%s",
                    room_type_id,
                    room_id,
                    check_in,
                    check_out,
                )
                return AvailabilityResult(available=True, room_id=room_id, occupancy=occupancy)
        return AvailabilityResult(available=False, occupancy=occupancy)
