"""CRM write path for contacts and booking deals."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import NoReturn, Optional

from booking_backend.domain.catalog import CHECK_IN_FIELD, CHECK_OUT_FIELD
from booking_backend.domain.errors import CollaboratorError
from booking_backend.repository.crm_transport import CrmTransport
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)

BOOKING_PIPELINE_ID = 0


def _fail(origin: str, message: str) -> NoReturn:
    error = CollaboratorError(message)
    log_failure(logger, origin, error)
    raise error


class CrmBookingGateway:
    """Creates contacts and booking deals. Holds no local state."""

    def __init__(self, transport: CrmTransport) -> None:
        self._transport = transport

    async def find_contact_id(self, phone: str) -> Optional[str]:
        response = await self._transport.call(
            "crm.contact.list",
            {"filter": {"PHONE": phone}, "select": ["ID"]},
        )
        contacts = response.get("result") or []
        if not contacts:
            return None
        contact_id = contacts[0].get("ID") if isinstance(contacts[0], dict) else None
        if not contact_id:
            _fail("CrmBookingGateway.find_contact_id", "Contact lookup returned no ID")
        return str(contact_id)

    async def create_contact(self, name: str, phone: str) -> str:
        response = await self._transport.call(
            "crm.contact.add",
            {
                "fields": {
                    "NAME": name,
                    "PHONE": [{"VALUE": phone, "VALUE_TYPE": "WORK"}],
                }
            },
        )
        if not response.get("result"):
            _fail("CrmBookingGateway.create_contact", "Failed to create contact")
        contact_id = str(response["result"])
        logger.info("Created CRM contact %s", contact_id)
        return contact_id

    async def create_booking_deal(
        self,
        *,
        room_type_id: str,
        room_id: str,
        room_name: str,
        check_in: date,
        check_out: date,
        contact_id: str,
        comments: str,
        total_cost: Decimal,
    ) -> str:
        response = await self._transport.call(
            "crm.deal.add",
            {
                "fields": {
                    "TITLE": f"Бронь на номер {room_name} дата заезда {check_in.isoformat()}",
                    "CATEGORY_ID": BOOKING_PIPELINE_ID,
                    CHECK_IN_FIELD: check_in.isoformat(),
                    CHECK_OUT_FIELD: check_out.isoformat(),
                    room_type_id: room_id,
                    "COMMENTS": comments or "",
                    "CONTACT_ID": contact_id,
                    "OPPORTUNITY": str(total_cost),
                }
            },
        )
        if not response.get("result"):
            _fail("CrmBookingGateway.create_booking_deal", "Failed to create booking")
        deal_id = str(response["result"])
        logger.info("Created booking deal %s for room %s/%s", deal_id, room_type_id, room_id)
        return deal_id
