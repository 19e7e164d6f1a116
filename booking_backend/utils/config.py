"""Application settings loaded from the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from booking_backend.domain.constraints import CrmConfig


ENV_FILE = Path.cwd() / ".env"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str = "Gulfstream Booking Engine"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    api_prefix: str = ""
    # Base64 AES ciphertext of the CRM incoming webhook URL.
    crm_encrypted_endpoint: str = ""
    crm_crypto_key: str = ""
    crm_crypto_iv: str = ""
    crm_timeout_seconds: float = 15.0

    def crm_config(self) -> CrmConfig:
        return CrmConfig(
            encrypted_endpoint=self.crm_encrypted_endpoint,
            crypto_key=self.crm_crypto_key,
            crypto_iv=self.crm_crypto_iv,
            timeout_seconds=self.crm_timeout_seconds,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(ENV_FILE, override=False)
    return Settings(
        app_name=os.getenv("APP_NAME", Settings.app_name),
        app_version=os.getenv("APP_VERSION", Settings.app_version),
        log_level=os.getenv("LOG_LEVEL", Settings.log_level),
        api_prefix=os.getenv("API_PREFIX", Settings.api_prefix).rstrip("/"),
        crm_encrypted_endpoint=os.getenv("BX_LINK", ""),
        crm_crypto_key=os.getenv("CRYPTO_KEY", ""),
        crm_crypto_iv=os.getenv("CRYPTO_IV", ""),
        crm_timeout_seconds=_env_float("CRM_TIMEOUT_SECONDS", Settings.crm_timeout_seconds),
    )
