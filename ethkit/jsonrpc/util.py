"""Helpers for the hex encodings used in JSON-RPC payloads."""

from __future__ import annotations

import re

_DEC_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_HEX_OR_EMPTY_RE = re.compile(r"[0-9a-fA-F]*")
_UINT64_MAX = (1 << 64) - 1


def encode_uint_to_hex(value: int) -> str:
    """Encode a non-negative integer as 0x-prefixed hex."""
    if value < 0:
        raise ValueError(f"negative value: {value}")
    return f"0x{value:x}"


def parse_big_int(text: str) -> int:
    """Parse hex text, with or without 0x prefix; text that is not hex yields 0."""
    digits = text.removeprefix("0x")
    if not _HEX_RE.fullmatch(digits):
        return 0
    return int(digits, 16)


def parse_uint64_or_hex(text: str) -> int:
    """Parse a uint64 given in decimal, or in hex when it carries a 0x prefix."""
    if text.startswith("0x"):
        digits, pattern, base = text[2:], _HEX_RE, 16
    else:
        digits, pattern, base = text, _DEC_RE, 10
    if not pattern.fullmatch(digits):
        raise ValueError(f"invalid number: {text!r}")
    number = int(digits, base)
    if number > _UINT64_MAX:
        raise ValueError(f"value out of uint64 range: {text!r}")
    return number


def encode_to_hex(data: bytes) -> str:
    """Encode bytes as 0x-prefixed hex."""
    return "0x" + bytes(data).hex()


def parse_hex_bytes(text: str) -> bytes:
    """Decode 0x-prefixed hex text into bytes; odd lengths are left-padded."""
    if not text.startswith("0x"):
        raise ValueError("it does not have 0x prefix")
    digits = text[2:]
    if not _HEX_OR_EMPTY_RE.fullmatch(digits):
        raise ValueError(f"invalid hex string: {text!r}")
    if len(digits) % 2:
        digits = "0" + digits
    return bytes.fromhex(digits)