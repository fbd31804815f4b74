"""Hex text encodings for numbers and byte strings used on the wire."""

from __future__ import annotations

import re

_HEX_RE = re.compile(r"[0-9a-fA-F]*")
_UINT64_MAX = (1 << 64) - 1


def _as_text(text: str | bytes) -> str:
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("ascii")
    return text


def _unhex(text: str) -> bytes:
    if not _HEX_RE.fullmatch(text):
        raise ValueError(f"invalid hex string: {text!r}")
    if len(text) % 2:
        raise ValueError(f"odd length hex string: {text!r}")
    return bytes.fromhex(text)


def decode_to_hex(text: str | bytes) -> bytes:
    """Decode hex text, with optional 0x prefix and odd length allowed, to bytes."""
    value = _as_text(text).removeprefix("0x")
    if len(value) % 2:
        value = "0" + value
    return _unhex(value)


def encode_to_hex(data: bytes) -> str:
    """Encode bytes as 0x-prefixed hex text."""
    return "0x" + bytes(data).hex()


def encode_big(value: int) -> str:
    """Encode an integer as 0x-prefixed hex without leading zeros."""
    return "0x" + format(value, "x")


def decode_big(text: str | bytes) -> int:
    """Decode hex text into a non-negative integer."""
    return int.from_bytes(decode_to_hex(text), "big")


def encode_uint64(value: int) -> str:
    """Encode an unsigned 64-bit integer as 0x-prefixed hex."""
    if not 0 <= value <= _UINT64_MAX:
        raise ValueError(f"value out of uint64 range: {value}")
    return "0x" + format(value, "x")


def decode_uint64(text: str | bytes) -> int:
    """Decode hex text into an unsigned 64-bit integer; empty text is zero."""
    value = _as_text(text).removeprefix("0x") or "0"
    if not _HEX_RE.fullmatch(value):
        raise ValueError(f"invalid hex number: {value!r}")
    number = int(value, 16)
    if number > _UINT64_MAX:
        raise ValueError(f"value out of uint64 range: {value!r}")
    return number


def encode_bytes(data: bytes) -> str:
    """Encode a byte string as 0x-prefixed hex text."""
    return encode_to_hex(data)


def decode_bytes(text: str | bytes) -> bytes:
    """Decode hex text into bytes; text that is not valid hex yields empty bytes."""
    try:
        return decode_to_hex(text)
    except ValueError:
        return b""