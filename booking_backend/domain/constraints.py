"""Domain-level validation rules for the CRM connection."""

from __future__ import annotations

import binascii
from dataclasses import dataclass


AES_KEY_BYTES = 32
AES_IV_BYTES = 16


@dataclass(frozen=True)
class CrmConfig:
    encrypted_endpoint: str
    crypto_key: str
    crypto_iv: str
    timeout_seconds: float


def _hex_length(value: str) -> int:
    try:
        return len(binascii.unhexlify(value))
    except (binascii.Error, ValueError):
        return -1


def validate_crm_config(config: CrmConfig) -> None:
    if not config.encrypted_endpoint:
        raise ValueError("BX_LINK (encrypted CRM endpoint) is not configured")
    if not config.crypto_key:
        raise ValueError("CRYPTO_KEY is not configured")
    if not config.crypto_iv:
        raise ValueError("CRYPTO_IV is not configured")
    if _hex_length(config.crypto_key) != AES_KEY_BYTES:
        raise ValueError(f"CRYPTO_KEY must be {AES_KEY_BYTES} bytes hex-encoded")
    if _hex_length(config.crypto_iv) != AES_IV_BYTES:
        raise ValueError(f"CRYPTO_IV must be {AES_IV_BYTES} bytes hex-encoded")
    if config.timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be > 0")
