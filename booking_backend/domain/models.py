"""Domain models for room availability, pricing and occupancy calendars."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional, Union


@dataclass(frozen=True)
class RoomType:
    room_type_id: str
    base_price: Decimal
    occupancy_multiplier: Decimal


@dataclass(frozen=True)
class RoomCategory:
    alias: str
    field_code: str
    display_name: str


@dataclass(frozen=True)
class Room:
    room_id: str
    name: str
    room_type_id: str


@dataclass(frozen=True)
class Reservation:
    reservation_id: str
    room_type_id: str
    room_id: str
    check_in: date
    check_out: date
    comments: str = ""


@dataclass(frozen=True)
class CategoryReservations:
    room_type_id: str
    reservations: tuple[Reservation, ...]


@dataclass(frozen=True)
class StayRequest:
    room_type_id: str
    check_in: date
    check_out: date
    room_id: Optional[str] = None


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    room_id: Optional[str] = None
    # Percent of the category's rooms taken, per night of the stay.
    occupancy: dict[date, float] = field(default_factory=dict)


@dataclass(frozen=True)
class NightlyRate:
    night: date
    rate: Decimal
    occupied: bool


@dataclass(frozen=True)
class PricingResult:
    total: Decimal
    nights: int
    nightly_rates: tuple[NightlyRate, ...] = ()


@dataclass(frozen=True)
class OccupiedRange:
    reservation_id: str
    check_in: date
    check_out: date
    comments: str


@dataclass
class RoomCalendarEntry:
    room_id: str
    name: str
    room_type_id: str
    occupied_ranges: list[OccupiedRange] = field(default_factory=list)


@dataclass(frozen=True)
class EnumerationField:
    """Category whose rooms are the items of a CRM list field."""

    field_code: str
    options: tuple[tuple[str, str], ...]

    def rooms(self) -> list[Room]:
        return [
            Room(room_id=room_id, name=name, room_type_id=self.field_code)
            for room_id, name in self.options
        ]


@dataclass(frozen=True)
class BooleanField:
    """Category backed by a yes/no field: a single implicit room."""

    IMPLICIT_ROOM_ID: ClassVar[str] = "1"

    field_code: str
    label: str

    def rooms(self) -> list[Room]:
        return [Room(room_id=self.IMPLICIT_ROOM_ID, name=self.label, room_type_id=self.field_code)]


RoomField = Union[EnumerationField, BooleanField]


@dataclass(frozen=True)
class BookingRequest:
    room_id: str
    room_type_id: str
    check_in: date
    check_out: date
    contact_name: str
    contact_phone: str
    comments: str = ""


@dataclass(frozen=True)
class BookingConfirmation:
    booking_id: str
    contact_id: str
    total_cost: Decimal
