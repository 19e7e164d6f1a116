"""HTTP transport for the CRM incoming webhook."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from booking_backend.domain.constraints import CrmConfig, validate_crm_config
from booking_backend.domain.errors import (
    BatchQueryError,
    CollaboratorError,
    CollaboratorTimeoutError,
)
from booking_backend.utils.crypto import decrypt_text
from booking_backend.utils.logger import get_logger, log_failure


logger = get_logger(__name__)


def encode_params(params: Mapping[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested params into PHP-style ``key[sub][0]`` form pairs."""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, Mapping):
            pairs.extend(encode_params(value, name))
        elif isinstance(value, (list, tuple)):
            pairs.extend(encode_params({index: item for index, item in enumerate(value)}, name))
        elif value is None:
            pairs.append((name, ""))
        else:
            pairs.append((name, str(value)))
    return pairs


class CrmTransport:
    """Issues one POST per logical CRM call and returns the parsed payload."""

    def __init__(
        self,
        config: CrmConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._client = client
        self._owns_client = client is None
        self._endpoint: str | None = None

    def verify(self) -> str:
        """Validate the connection config and resolve the endpoint once."""
        if self._endpoint is not None:
            return self._endpoint
        try:
            validate_crm_config(self._config)
        except ValueError as exc:
            error = CollaboratorError(f"Invalid CRM configuration: {exc}")
            log_failure(logger, "CrmTransport.verify", error)
            raise error from exc
        try:
            endpoint = decrypt_text(
                self._config.encrypted_endpoint,
                self._config.crypto_key,
                self._config.crypto_iv,
            )
        except CollaboratorError as exc:
            log_failure(logger, "CrmTransport.verify", exc)
            raise
        self._endpoint = endpoint if endpoint.endswith("/") else f"{endpoint}/"
        logger.info("CRM endpoint resolved")
        return self._endpoint

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout_seconds)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _post(self, endpoint: str, method: str, form: list[tuple[str, str]]) -> dict[str, Any]:
        url = f"{endpoint}{method}"
        try:
            response = await self._get_client().post(url, data=dict(form))
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise CollaboratorTimeoutError(f"CRM call {method} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise CollaboratorError(
                f"CRM call {method} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"CRM call {method} failed: {exc}") from exc
        except ValueError as exc:
            raise CollaboratorError(f"CRM call {method} returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise CollaboratorError(f"CRM call {method} returned an unexpected payload")
        if payload.get("error"):
            description = payload.get("error_description") or ""
            raise CollaboratorError(f"CRM API error: {payload['error']} {description}".strip())
        return payload

    async def call(self, method: str, params: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        if not method:
            raise ValueError("method is required")
        endpoint = self.verify()
        try:
            return await self._post(endpoint, method, encode_params(params or {}))
        except CollaboratorError as exc:
            log_failure(logger, f"CrmTransport.call[{method}]", exc)
            raise

    async def batch(
        self,
        commands: Mapping[str, str],
        halt: bool = False,
    ) -> tuple[dict[str, Any], dict[str, int]]:
        """Run sub-queries in one round-trip; return results and next-page offsets by alias.

        List methods return one page per sub-query; an alias present in the
        offsets has more rows to fetch with ``start=<offset>``.
        """
        form = [("halt", "1" if halt else "0")]
        form.extend((f"cmd[{alias}]", command) for alias, command in commands.items())
        endpoint = self.verify()
        try:
            payload = await self._post(endpoint, "batch", form)
            envelope = payload.get("result")
            if not isinstance(envelope, dict) or "result" not in envelope:
                raise CollaboratorError("Invalid batch response format")
            errors = envelope.get("result_error") or {}
            if errors:
                if isinstance(errors, list):
                    errors = {str(index): item for index, item in enumerate(errors)}
                raise BatchQueryError(errors)
            return _keyed(envelope["result"]), _next_offsets(envelope.get("result_next"))
        except CollaboratorError as exc:
            log_failure(logger, "CrmTransport.batch", exc)
            raise


def _keyed(results: Any) -> dict[str, Any]:
    # Empty maps come back as a JSON list.
    if isinstance(results, list):
        return {str(index): item for index, item in enumerate(results)}
    return dict(results or {})


def _next_offsets(raw: Any) -> dict[str, int]:
    offsets: dict[str, int] = {}
    for alias, value in _keyed(raw).items():
        try:
            offsets[alias] = int(value)
        except (TypeError, ValueError) as exc:
            raise CollaboratorError(f"Invalid next page offset for {alias}: {value!r}") from exc
    return offsets
