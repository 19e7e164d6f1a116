"""Tests for the monthly room occupancy calendar."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from booking_backend.domain.errors import BatchQueryError, CategoryNotFoundError, StayValidationError
from booking_backend.repository.reservation_repository import ReservationRepository
from booking_backend.repository.room_directory import RoomDirectory
from booking_backend.services.occupancy_service import RoomOccupancyService


STANDARD = "UF_CRM_DEAL_1750132990506"
HOUSE_2 = "UF_CRM_1750506568"


def _service(crm_transport) -> RoomOccupancyService:
    return RoomOccupancyService(
        repository=ReservationRepository(crm_transport),
        room_directory=RoomDirectory(crm_transport),
    )


def test_calendar_lists_every_room_and_keeps_comments(fake_crm, crm_transport) -> None:
    fake_crm.add_enumeration(STANDARD, [("45", "101"), ("46", "102"), ("47", "103")])
    fake_crm.add_deal(STANDARD, "46", "2025-07-03", "2025-07-05", comments="baby cot", deal_id="501")
    fake_crm.add_deal(STANDARD, "46", "2025-07-10", "2025-07-12", comments="", deal_id="502")
    fake_crm.add_deal(STANDARD, "45", "2025-07-20", "2025-07-21", comments="VIP", deal_id="503")

    calendar = asyncio.run(_service(crm_transport).get_rooms_info(2025, 7, STANDARD))

    assert [entry.room_id for entry in calendar] == ["45", "46", "47"]
    assert [entry.name for entry in calendar] == ["101", "102", "103"]
    by_room = {entry.room_id: entry for entry in calendar}
    assert by_room["47"].occupied_ranges == []
    assert [item.reservation_id for item in by_room["46"].occupied_ranges] == ["501", "502"]
    assert by_room["46"].occupied_ranges[0].comments == "baby cot"
    assert by_room["46"].occupied_ranges[0].check_in == date(2025, 7, 3)
    assert by_room["45"].occupied_ranges[0].comments == "VIP"


def test_reservations_for_unknown_rooms_are_ignored(fake_crm, crm_transport) -> None:
    fake_crm.add_enumeration(STANDARD, [("45", "101")])
    fake_crm.add_deal(STANDARD, "99", "2025-07-03", "2025-07-05")

    calendar = asyncio.run(_service(crm_transport).get_rooms_info(2025, 7, STANDARD))

    assert len(calendar) == 1
    assert calendar[0].occupied_ranges == []


def test_boolean_category_has_one_room(fake_crm, crm_transport) -> None:
    fake_crm.add_boolean(HOUSE_2, "Домик 2")
    fake_crm.add_deal(HOUSE_2, "1", "2025-08-01", "2025-08-03", deal_id="900")

    calendar = asyncio.run(_service(crm_transport).get_rooms_info(2025, 8, HOUSE_2))

    assert [(entry.room_id, entry.name) for entry in calendar] == [("1", "Домик 2")]
    assert [item.reservation_id for item in calendar[0].occupied_ranges] == ["900"]


def test_unknown_category_is_not_found(fake_crm, crm_transport) -> None:
    with pytest.raises(CategoryNotFoundError):
        asyncio.run(_service(crm_transport).get_rooms_info(2025, 7, STANDARD))


def test_failed_sub_query_propagates(fake_crm, crm_transport) -> None:
    fake_crm.add_enumeration(STANDARD, [("45", "101")])
    fake_crm.batch_errors["category"] = {"error": "INTERNAL_SERVER_ERROR"}

    with pytest.raises(BatchQueryError):
        asyncio.run(_service(crm_transport).get_rooms_info(2025, 7, STANDARD))


def test_invalid_month_is_a_validation_error(fake_crm, crm_transport) -> None:
    with pytest.raises(StayValidationError):
        asyncio.run(_service(crm_transport).get_rooms_info(2025, 13, STANDARD))
    assert fake_crm.requests == []
