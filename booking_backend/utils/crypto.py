"""AES-256-CBC helpers for the stored CRM webhook endpoint."""

from __future__ import annotations

import base64
import binascii
import secrets

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from booking_backend.domain.constraints import AES_IV_BYTES, AES_KEY_BYTES
from booking_backend.domain.errors import CredentialDecryptionError


def generate_key_and_iv() -> tuple[str, str]:
    """Return a fresh (key, iv) pair, both hex-encoded."""
    return secrets.token_hex(AES_KEY_BYTES), secrets.token_hex(AES_IV_BYTES)


def _cipher(key_hex: str, iv_hex: str) -> Cipher:
    return Cipher(
        algorithms.AES(binascii.unhexlify(key_hex)),
        modes.CBC(binascii.unhexlify(iv_hex)),
    )


def encrypt_text(plaintext: str, key_hex: str, iv_hex: str) -> str:
    """Encrypt ``plaintext`` and return the ciphertext as base64."""
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = _cipher(key_hex, iv_hex).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(ciphertext).decode("ascii")


def decrypt_text(ciphertext_b64: str, key_hex: str, iv_hex: str) -> str:
    """Reverse of :func:`encrypt_text`."""
    try:
        ciphertext = base64.b64decode(ciphertext_b64, validate=True)
        decryptor = _cipher(key_hex, iv_hex).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")
    except (binascii.Error, ValueError, UnicodeDecodeError) as exc:
        raise CredentialDecryptionError(f"Failed to decrypt CRM endpoint: {exc}") from exc
