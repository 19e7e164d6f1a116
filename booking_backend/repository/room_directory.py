"""Room enumeration backed by CRM deal field metadata."""

from __future__ import annotations

from typing import NoReturn

from booking_backend.domain.errors import (
    BookingEngineError,
    CategoryNotFoundError,
    CollaboratorError,
    UnsupportedRoomFieldError,
)
from booking_backend.domain.models import BooleanField, EnumerationField, Room, RoomField
from booking_backend.repository.crm_transport import CrmTransport
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)

_LABEL_KEYS = ("listLabel", "formLabel", "filterLabel", "title")


def _fail(error: BookingEngineError) -> NoReturn:
    log_failure(logger, "RoomDirectory.get_room_field", error)
    raise error


class RoomDirectory:
    """Resolves the rooms of a category from its CRM field definition."""

    def __init__(self, transport: CrmTransport) -> None:
        self._transport = transport

    async def get_room_field(self, room_type_id: str) -> RoomField:
        if not room_type_id:
            raise ValueError("room_type_id is required")
        response = await self._transport.call("crm.deal.fields")
        fields = response.get("result")
        if not isinstance(fields, dict):
            _fail(CollaboratorError("Failed to get deal fields"))

        definition = fields.get(room_type_id)
        if not definition:
            _fail(CategoryNotFoundError(f"Field {room_type_id} not found in deal fields"))

        field_type = definition.get("type")
        if field_type == "enumeration":
            return await self._load_enumeration(room_type_id)
        if field_type == "boolean":
            label = next(
                (definition[key] for key in _LABEL_KEYS if definition.get(key)),
                room_type_id,
            )
            return BooleanField(field_code=room_type_id, label=str(label))
        _fail(
            UnsupportedRoomFieldError(
                f"Unsupported field type {field_type} for field {room_type_id}"
            )
        )

    async def _load_enumeration(self, room_type_id: str) -> EnumerationField:
        response = await self._transport.call(
            "crm.deal.userfield.list",
            {"filter": {"FIELD_NAME": room_type_id}},
        )
        entries = response.get("result") or []
        if not entries or not isinstance(entries[0], dict):
            _fail(CollaboratorError(f"No list values found for field {room_type_id}"))
        items = entries[0].get("LIST") or []
        if not items:
            _fail(CollaboratorError(f"No list items found for field {room_type_id}"))

        options: list[tuple[str, str]] = []
        for item in items:
            item_id = item.get("ID") if isinstance(item, dict) else None
            value = item.get("VALUE") if isinstance(item, dict) else None
            if item_id in (None, "") or value is None:
                _fail(CollaboratorError(f"Malformed list item for field {room_type_id}: {item!r}"))
            options.append((str(item_id), str(value)))
        return EnumerationField(field_code=room_type_id, options=tuple(options))

    async def list_rooms(self, room_type_id: str) -> list[Room]:
        """Rooms of the category in CRM enumeration order."""
        room_field = await self.get_room_field(room_type_id)
        return room_field.rooms()
