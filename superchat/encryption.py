"""AES-256-GCM message sealing with base64 transport encoding."""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

__all__ = ["DecryptionError", "encrypt", "decrypt", "NONCE_SIZE"]

NONCE_SIZE = 12

# Shared demonstration key; override with SUPERCHAT_KEY (exactly 32 bytes).
_DEMO_KEY = b"01234567890123456789012345678901"


class DecryptionError(ValueError):
    """Raised when a ciphertext cannot be decoded or authenticated."""


def _key() -> bytes:
    override = os.environ.get("SUPERCHAT_KEY")
    if override is None:
        return _DEMO_KEY
    key = override.encode("utf-8")
    if len(key) not in (16, 24, 32):
        raise ValueError("SUPERCHAT_KEY must be 16, 24 or 32 bytes long")
    return key


def encrypt(plaintext: bytes | str) -> str:
    """Seal plaintext and return base64(nonce || ciphertext || tag)."""
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    nonce = os.urandom(NONCE_SIZE)
    sealed = AESGCM(_key()).encrypt(nonce, bytes(plaintext), None)
    return base64.b64encode(nonce + sealed).decode("ascii")


def decrypt(ciphertext_b64: str) -> str:
    """Open a value produced by :func:`encrypt` and return its text."""
    try:
        raw = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError(f"illegal base64 data: {exc}") from exc
    if len(raw) < NONCE_SIZE:
        raise DecryptionError("ciphertext too short")
    nonce, data = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
    try:
        plaintext = AESGCM(_key()).decrypt(nonce, data, None)
    except InvalidTag as exc:
        raise DecryptionError("message authentication failed") from exc
    return plaintext.decode("utf-8", errors="replace")