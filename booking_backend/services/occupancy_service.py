"""Monthly per-room occupancy calendar."""

from __future__ import annotations

from booking_backend.domain.errors import (
    CategoryNotFoundError,
    StayValidationError,
)
from booking_backend.domain.models import OccupiedRange, RoomCalendarEntry
from booking_backend.repository.reservation_repository import ReservationRepository
from booking_backend.repository.room_directory import RoomDirectory
from booking_backend.services.availability_service import severity_for
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)


class RoomOccupancyService:
    """Joins a category's rooms with the month's reservations."""

    def __init__(
        self,
        repository: ReservationRepository,
        room_directory: RoomDirectory,
    ) -> None:
        self._repository = repository
        self._room_directory = room_directory

    async def get_rooms_info(
        self,
        year: int,
        month: int,
        room_type_id: str,
    ) -> list[RoomCalendarEntry]:
        try:
            if not room_type_id:
                raise StayValidationError("Category field is required")
            if not 1 <= month <= 12:
                raise StayValidationError("month must be between 1 and 12")
            if year < 1:
                raise StayValidationError("year must be positive")
        except StayValidationError as exc:
            log_failure(logger, "RoomOccupancyService.get_rooms_info", exc, severity_for(exc))
            raise

        rooms = await self._room_directory.list_rooms(room_type_id)
        grouped = await self._repository.fetch_month(year, month, room_type_id)
        category = grouped.get(room_type_id)
        if category is None:
            error = CategoryNotFoundError(
                f"Category {room_type_id} not found in reservations response"
            )
            log_failure(logger, "RoomOccupancyService.get_rooms_info", error)
            raise error

        calendar = {
            room.room_id: RoomCalendarEntry(
                room_id=room.room_id,
                name=room.name,
                room_type_id=room_type_id,
            )
            for room in rooms
        }
        for reservation in category.reservations:
            entry = calendar.get(reservation.room_id)
            if entry is None:
                continue
            entry.occupied_ranges.append(
                OccupiedRange(
                    reservation_id=reservation.reservation_id,
                    check_in=reservation.check_in,
                    check_out=reservation.check_out,
                    comments=reservation.comments,
                )
            )
        return list(calendar.values())
