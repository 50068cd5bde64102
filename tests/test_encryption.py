import base64

import pytest

from superchat.encryption import NONCE_SIZE, DecryptionError, decrypt, encrypt


@pytest.mark.parametrize(
    "text", ["hello", "", "[alice] hi there", "✨ unicode ✨", "x" * 5000]
)
def test_round_trip_text(text):
    assert decrypt(encrypt(text)) == text


def test_round_trip_bytes():
    assert decrypt(encrypt(b"raw bytes")) == "raw bytes"


def test_nonce_makes_output_differ():
    first = encrypt("same")
    second = encrypt("same")
    assert first != second
    assert decrypt(first) == decrypt(second) == "same"


def test_layout_is_nonce_plus_ciphertext_plus_tag():
    message = b"layout"
    raw = base64.b64decode(encrypt(message))
    assert len(raw) == NONCE_SIZE + len(message) + 16


def test_tampered_ciphertext_rejected():
    raw = bytearray(base64.b64decode(encrypt("secret message")))
    raw[-1] ^= 0x01
    with pytest.raises(DecryptionError):
        decrypt(base64.b64encode(bytes(raw)).decode())


def test_too_short_rejected():
    short = base64.b64encode(b"abc").decode()
    with pytest.raises(DecryptionError, match="ciphertext too short"):
        decrypt(short)


def test_invalid_base64_rejected():
    with pytest.raises(DecryptionError):
        decrypt("not*base64!")


def test_wrong_key_rejected(monkeypatch):
    sealed = encrypt("hello")
    monkeypatch.setenv("SUPERCHAT_KEY", "a" * 32)
    with pytest.raises(DecryptionError):
        decrypt(sealed)


def test_bad_key_length_rejected(monkeypatch):
    monkeypatch.setenv("SUPERCHAT_KEY", "short")
    with pytest.raises(ValueError):
        encrypt("hello")