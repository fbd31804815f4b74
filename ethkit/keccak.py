"""Legacy Keccak-256 hashing as used by Ethereum."""

from __future__ import annotations

from Crypto.Hash import keccak


def keccak256(*args: bytes) -> bytes:
    """Return the Keccak-256 digest of the concatenation of all arguments."""
    hasher = keccak.new(digest_bits=256)
    for chunk in args:
        hasher.update(bytes(chunk))
    return hasher.digest()