from __future__ import annotations

import json
from datetime import date
from itertools import count
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx
import pytest

from booking_backend.domain.catalog import CHECK_IN_FIELD, CHECK_OUT_FIELD
from booking_backend.domain.constraints import CrmConfig
from booking_backend.repository.crm_transport import CrmTransport
from booking_backend.utils.crypto import encrypt_text, generate_key_and_iv


WEBHOOK_URL = "https://crm.example.test/rest/1/token/"


def _as_date(value: Any) -> Optional[date]:
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class FakeCrm:
    """In-memory stand-in for the CRM REST webhook."""

    def __init__(self) -> None:
        self.deals: list[dict[str, Any]] = []
        self.fields: dict[str, dict[str, Any]] = {}
        self.enumerations: dict[str, list[tuple[str, str]]] = {}
        self.batch_errors: dict[str, Any] = {}
        self.contacts: dict[str, str] = {}
        self.created_deals: list[dict[str, str]] = []
        self.requests: list[tuple[str, list[tuple[str, str]]]] = []
        self.page_size = 50
        self._ids = count(100)

    # --- fixtures -------------------------------------------------------

    def add_deal(
        self,
        room_type_id: str,
        room_id: str,
        check_in: str,
        check_out: str,
        comments: str = "",
        deal_id: Optional[str] = None,
    ) -> str:
        deal_id = deal_id or str(next(self._ids))
        self.deals.append(
            {
                "ID": deal_id,
                CHECK_IN_FIELD: check_in,
                CHECK_OUT_FIELD: check_out,
                room_type_id: room_id,
                "COMMENTS": comments,
            }
        )
        return deal_id

    def add_enumeration(self, field_code: str, rooms: list[tuple[str, str]]) -> None:
        self.fields[field_code] = {"type": "enumeration", "title": field_code}
        self.enumerations[field_code] = rooms

    def add_boolean(self, field_code: str, label: str) -> None:
        self.fields[field_code] = {"type": "boolean", "listLabel": label, "title": field_code}

    def methods(self) -> list[str]:
        return [method for method, _ in self.requests]

    # --- transport ------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        form = parse_qsl(request.content.decode(), keep_blank_values=True)
        self.requests.append((method, form))
        params = dict(form)

        if method == "batch":
            return self._batch(form)
        if method == "crm.deal.fields":
            return self._ok(self.fields)
        if method == "crm.deal.userfield.list":
            field_code = params.get("filter[FIELD_NAME]", "")
            if field_code not in self.enumerations:
                return self._ok([])
            items = [{"ID": room_id, "VALUE": name} for room_id, name in self.enumerations[field_code]]
            return self._ok([{"FIELD_NAME": field_code, "LIST": items}])
        if method == "crm.contact.list":
            phone = params.get("filter[PHONE]", "")
            if phone in self.contacts:
                return self._ok([{"ID": self.contacts[phone]}])
            return self._ok([])
        if method == "crm.contact.add":
            contact_id = str(next(self._ids))
            self.contacts[params["fields[PHONE][0][VALUE]"]] = contact_id
            return self._ok(int(contact_id))
        if method == "crm.deal.add":
            deal_id = str(next(self._ids))
            fields = {
                key[len("fields["):-1]: value
                for key, value in form
                if key.startswith("fields[")
            }
            self.created_deals.append(fields)
            return self._ok(int(deal_id))
        return httpx.Response(
            400,
            json={"error": "ERROR_METHOD_NOT_FOUND", "error_description": method},
        )

    def _batch(self, form: list[tuple[str, str]]) -> httpx.Response:
        results: dict[str, Any] = {}
        errors: dict[str, Any] = {}
        next_offsets: dict[str, int] = {}
        totals: dict[str, int] = {}
        for key, command in form:
            if not key.startswith("cmd["):
                continue
            alias = key[len("cmd["):-1]
            if alias in self.batch_errors:
                errors[alias] = self.batch_errors[alias]
                continue
            rows, offset = self._deal_list(command)
            page = rows[offset:offset + self.page_size]
            results[alias] = page
            totals[alias] = len(rows)
            if offset + self.page_size < len(rows):
                next_offsets[alias] = offset + self.page_size
        return self._ok(
            {
                "result": results,
                "result_error": errors or [],
                "result_total": totals,
                "result_next": next_offsets or [],
            }
        )

    def _deal_list(self, command: str) -> tuple[list[dict[str, Any]], int]:
        _, query = command.split("?", 1)
        pairs = parse_qsl(query, keep_blank_values=True)
        filters = {key: value for key, value in pairs if key.startswith("filter[")}
        selected = [value for key, value in pairs if key == "select[]"]
        offset = int(dict(pairs).get("start", 0))
        month_end = date.fromisoformat(filters[f"filter[<={CHECK_IN_FIELD}]"])
        month_start = date.fromisoformat(filters[f"filter[>={CHECK_OUT_FIELD}]"])
        required = [key[len("filter[!"):-1] for key in filters if key.startswith("filter[!")]
        rows = []
        for deal in self.deals:
            if any(deal.get(field) in (None, "") for field in required):
                continue
            check_in = _as_date(deal.get(CHECK_IN_FIELD))
            check_out = _as_date(deal.get(CHECK_OUT_FIELD))
            if check_in is not None and check_in > month_end:
                continue
            if check_out is not None and check_out < month_start:
                continue
            rows.append({field: deal.get(field, "") for field in selected})
        return rows, offset

    @staticmethod
    def _ok(result: Any) -> httpx.Response:
        return httpx.Response(200, content=json.dumps({"result": result}, ensure_ascii=False))


def build_crm_config(timeout_seconds: float = 5.0) -> CrmConfig:
    key_hex, iv_hex = generate_key_and_iv()
    return CrmConfig(
        encrypted_endpoint=encrypt_text(WEBHOOK_URL, key_hex, iv_hex),
        crypto_key=key_hex,
        crypto_iv=iv_hex,
        timeout_seconds=timeout_seconds,
    )


@pytest.fixture
def fake_crm() -> FakeCrm:
    return FakeCrm()


@pytest.fixture
def crm_config() -> CrmConfig:
    return build_crm_config()


@pytest.fixture
def crm_transport(fake_crm: FakeCrm, crm_config: CrmConfig) -> CrmTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_crm.handler))
    return CrmTransport(crm_config, client=client)
