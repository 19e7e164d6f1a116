#!/usr/bin/env python3
"""Encrypt a CRM incoming webhook URL and store it in the env file.

    python scripts/init_crm_credentials.py https://example.bitrix24.kz/rest/1/abc/
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import set_key

from booking_backend.utils.crypto import encrypt_text, generate_key_and_iv


def write_credentials(webhook_url: str, env_file: Path) -> None:
    key_hex, iv_hex = generate_key_and_iv()
    encrypted = encrypt_text(webhook_url, key_hex, iv_hex)
    env_file.touch(exist_ok=True)
    set_key(str(env_file), "CRYPTO_KEY", key_hex, quote_mode="never")
    set_key(str(env_file), "CRYPTO_IV", iv_hex, quote_mode="never")
    set_key(str(env_file), "BX_LINK", encrypted, quote_mode="never")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("webhook_url", help="CRM incoming webhook URL")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=PROJECT_ROOT / ".env",
        help="env file to update (default: project .env)",
    )
    args = parser.parse_args(argv)

    if not args.webhook_url.startswith(("http://", "https://")):
        print("webhook_url must be an http(s) URL", file=sys.stderr)
        return 2

    write_credentials(args.webhook_url, args.env_file)
    print(f"CRM credentials written to {args.env_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
