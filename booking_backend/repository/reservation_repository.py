"""Repository layer for reservation (CRM deal) lookups."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional
from urllib.parse import urlencode

from booking_backend.domain.catalog import CHECK_IN_FIELD, CHECK_OUT_FIELD, RoomCatalog
from booking_backend.domain.errors import CollaboratorError
from booking_backend.domain.intervals import month_bounds
from booking_backend.domain.models import CategoryReservations, Reservation
from booking_backend.repository.crm_transport import CrmTransport
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)

SINGLE_CATEGORY_ALIAS = "category"
_EMPTY_ROOM_VALUES = {"", "0"}


def build_deal_list_command(
    field_code: str,
    month_start: date,
    month_end: date,
    start: int = 0,
) -> str:
    """Build a ``crm.deal.list`` sub-query for the category's deals touching the month."""
    params = [
        # Empty value with the ``!`` prefix selects deals where the field is set.
        (f"filter[!{field_code}]", ""),
        (f"filter[<={CHECK_IN_FIELD}]", month_end.isoformat()),
        (f"filter[>={CHECK_OUT_FIELD}]", month_start.isoformat()),
        ("select[]", "ID"),
        ("select[]", CHECK_IN_FIELD),
        ("select[]", CHECK_OUT_FIELD),
        ("select[]", field_code),
        ("select[]", "COMMENTS"),
    ]
    if start:
        params.append(("start", str(start)))
    return f"crm.deal.list?{urlencode(params)}"


def _parse_crm_date(value: Any, deal_id: str) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        # Date fields arrive either as YYYY-MM-DD or as an ISO timestamp.
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise CollaboratorError(f"Deal {deal_id} has a malformed date: {value!r}") from exc


def _room_value(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = next((item for item in value if item not in (None, "")), None)
    if value is None or value is False:
        return None
    text = str(value).strip()
    if text in _EMPTY_ROOM_VALUES:
        return None
    return text


class ReservationRepository:
    """Fetches a month of reservations per room category in one batch call per result page."""

    def __init__(self, transport: CrmTransport, catalog: Optional[RoomCatalog] = None) -> None:
        self._transport = transport
        self._catalog = catalog or RoomCatalog()

    async def fetch_month(
        self,
        year: int,
        month: int,
        room_type_id: Optional[str] = None,
    ) -> dict[str, CategoryReservations]:
        """Return reservations touching ``(year, month)`` keyed by category field code."""
        start, end = month_bounds(year, month)
        if room_type_id:
            field_by_alias = {SINGLE_CATEGORY_ALIAS: room_type_id}
        else:
            field_by_alias = {
                category.alias: category.field_code for category in self._catalog.categories
            }

        rows_by_alias = await self._fetch_all_pages(field_by_alias, start, end)
        try:
            grouped: dict[str, CategoryReservations] = {}
            for alias, rows in rows_by_alias.items():
                field_code = field_by_alias[alias]
                grouped[field_code] = CategoryReservations(
                    room_type_id=field_code,
                    reservations=tuple(self._parse_rows(field_code, rows)),
                )
        except CollaboratorError as exc:
            log_failure(logger, "ReservationRepository.fetch_month", exc)
            raise

        logger.debug(
            "Fetched %s/%s reservations for %s categories",
            year,
            month,
            len(grouped),
        )
        return grouped

    async def _fetch_all_pages(
        self,
        field_by_alias: dict[str, str],
        start: date,
        end: date,
    ) -> dict[str, list[dict[str, Any]]]:
        """Collect every page of each sub-query; only aliases the CRM answered are kept."""
        pending = {
            alias: build_deal_list_command(field_code, start, end)
            for alias, field_code in field_by_alias.items()
        }
        rows_by_alias: dict[str, list[dict[str, Any]]] = {}
        offsets: dict[str, int] = {}
        while pending:
            results, next_offsets = await self._transport.batch(pending, halt=False)
            pending = {}
            try:
                for alias, rows in results.items():
                    if alias not in field_by_alias:
                        continue
                    if not isinstance(rows, list):
                        raise CollaboratorError(f"Sub-query {alias} returned an invalid payload")
                    rows_by_alias.setdefault(alias, []).extend(rows)

                for alias, offset in next_offsets.items():
                    if alias not in field_by_alias:
                        continue
                    if offset <= offsets.get(alias, 0):
                        raise CollaboratorError(
                            f"Sub-query {alias} did not advance past offset {offset}"
                        )
                    offsets[alias] = offset
                    pending[alias] = build_deal_list_command(
                        field_by_alias[alias], start, end, start=offset
                    )
            except CollaboratorError as exc:
                log_failure(logger, "ReservationRepository.fetch_month", exc)
                raise
            if pending:
                logger.debug("Fetching next reservation pages: %s", offsets)
        return rows_by_alias

    def _parse_rows(self, field_code: str, rows: Iterable[dict[str, Any]]) -> Iterable[Reservation]:
        for row in rows:
            deal_id = str(row.get("ID", ""))
            room_id = _room_value(row.get(field_code))
            if room_id is None:
                # No room assigned in this category.
                continue
            check_in = _parse_crm_date(row.get(CHECK_IN_FIELD), deal_id)
            check_out = _parse_crm_date(row.get(CHECK_OUT_FIELD), deal_id)
            if check_in is None or check_out is None:
                continue
            if check_in >= check_out:
                logger.warning(
                    "Skipping deal %s: check-out %s is not after check-in %s",
                    deal_id,
                    check_out,
                    check_in,
                )
                continue
            yield Reservation(
                reservation_id=deal_id,
                room_type_id=field_code,
                room_id=room_id,
                check_in=check_in,
                check_out=check_out,
                comments=row.get("COMMENTS") or "",
            )
