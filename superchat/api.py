"""In-memory message store exposed through simple HTTP-style handlers."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field

from superchat.encryption import DecryptionError, decrypt, encrypt

__all__ = ["HttpResponse", "ChatAPI"]

log = logging.getLogger(__name__)

_ERROR_HEADERS = {
    "Content-Type": "text/plain; charset=utf-8",
    "X-Content-Type-Options": "nosniff",
}


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and body produced by a handler."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def error(cls, message: str, status: int) -> "HttpResponse":
        return cls(status, (message + "\n").encode("utf-8"), dict(_ERROR_HEADERS))


def _reject_constant(name: str):
    raise ValueError(f"invalid JSON constant {name}")


def _parse_content(body: bytes) -> str:
    """Extract the ``content`` field the way a lenient struct decoder would."""
    doc = json.loads(
        body.decode("utf-8", errors="replace"), parse_constant=_reject_constant
    )
    if doc is None:
        return ""
    if not isinstance(doc, dict):
        raise ValueError("JSON value is not an object")
    if "content" in doc:
        value = doc["content"]
    else:
        value = next(
            (v for k, v in doc.items() if k.casefold() == "content"), None
        )
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("content is not a string")
    return value


def _marshal(values: list[str] | None) -> bytes:
    text = json.dumps(values, ensure_ascii=False, separators=(",", ":"))
    for raw, escaped in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(raw, escaped)
    return text.encode("utf-8")


class ChatAPI:
    """Keeps encrypted messages and serves them back decrypted."""

    def __init__(self) -> None:
        self._messages: list[str] = []
        self._lock = threading.Lock()

    def send_message_handler(self, method: str, body: bytes) -> HttpResponse:
        """Handle a POST carrying ``{"content": ...}``."""
        if method != "POST":
            return HttpResponse.error("Invalid request method", 405)
        try:
            content = _parse_content(body)
        except ValueError:
            return HttpResponse.error("Invalid JSON", 400)
        try:
            sealed = encrypt(content)
        except Exception:
            return HttpResponse.error("Encryption error", 500)
        with self._lock:
            self._messages.append(sealed)
        log.info("Message received via API: %s", content)
        return HttpResponse(200)

    def get_messages_handler(self, method: str) -> HttpResponse:
        """Handle a GET returning all messages as a JSON array."""
        if method != "GET":
            return HttpResponse.error("Invalid request method", 405)
        with self._lock:
            decrypted: list[str] = []
            for sealed in self._messages:
                try:
                    decrypted.append(decrypt(sealed))
                except DecryptionError:
                    decrypted.append("DECRYPTION ERROR")
        payload = _marshal(decrypted or None)
        return HttpResponse(200, payload, {"Content-Type": "application/json"})