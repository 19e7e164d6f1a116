"""Static room category and pricing registry."""

from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from booking_backend.domain.errors import StayValidationError
from booking_backend.domain.models import RoomCategory, RoomType


# CRM deal fields holding the stay dates.
CHECK_IN_FIELD = "UF_CRM_1749509439624"
CHECK_OUT_FIELD = "UF_CRM_1749787453685"

ROOM_CATEGORIES: tuple[RoomCategory, ...] = (
    RoomCategory("standard", "UF_CRM_DEAL_1750132990506", "Стандарт"),
    RoomCategory("lux", "UF_CRM_DEAL_1750133047593", "Люкс"),
    RoomCategory("comfort", "UF_CRM_1750505541730", "Комфорт"),
    RoomCategory("standard_plus", "UF_CRM_1750505607", "Стандарт Plus"),
    RoomCategory("townhouse", "UF_CRM_1750505755286", "Таунхаус"),
    RoomCategory("townhouse_big", "UF_CRM_1750505983944", "Таунхаус Big"),
    RoomCategory("house_1", "UF_CRM_1750506555", "Домик 1"),
    RoomCategory("house_2", "UF_CRM_1750506568", "Домик 2"),
    RoomCategory("house_3", "UF_CRM_1750506579", "Домик 3"),
)

ROOM_TYPES: Mapping[str, RoomType] = MappingProxyType(
    {
        "UF_CRM_DEAL_1750132990506": RoomType(
            room_type_id="UF_CRM_DEAL_1750132990506",
            base_price=Decimal("5000"),
            occupancy_multiplier=Decimal("1.2"),
        ),
        "UF_CRM_DEAL_1750133047593": RoomType(
            room_type_id="UF_CRM_DEAL_1750133047593",
            base_price=Decimal("10000"),
            occupancy_multiplier=Decimal("1.3"),
        ),
    }
)


class RoomCatalog:
    """Read-only lookup over room categories and their pricing profiles."""

    def __init__(
        self,
        room_types: Optional[Mapping[str, RoomType]] = None,
        categories: Optional[Iterable[RoomCategory]] = None,
    ) -> None:
        self._room_types = MappingProxyType(dict(room_types if room_types is not None else ROOM_TYPES))
        self._categories = tuple(categories if categories is not None else ROOM_CATEGORIES)
        for room_type in self._room_types.values():
            if room_type.base_price <= 0:
                raise ValueError(f"{room_type.room_type_id}: base_price must be > 0")
            if room_type.occupancy_multiplier <= 1:
                raise ValueError(f"{room_type.room_type_id}: occupancy_multiplier must be > 1")

    @property
    def categories(self) -> tuple[RoomCategory, ...]:
        return self._categories

    def category(self, room_type_id: str) -> Optional[RoomCategory]:
        for category in self._categories:
            if category.field_code == room_type_id:
                return category
        return None

    def is_priced(self, room_type_id: str) -> bool:
        return room_type_id in self._room_types

    def get_room_type(self, room_type_id: str) -> RoomType:
        room_type = self._room_types.get(room_type_id)
        if room_type is None:
            raise StayValidationError(f"Invalid room type: {room_type_id}")
        return room_type
