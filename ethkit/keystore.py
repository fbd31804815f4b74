"""Encrypted key files in the version 3 and version 4 keystore formats."""

from __future__ import annotations

import hashlib
import hmac
import json
import os
import re
import unicodedata
from typing import Any

from Crypto.Cipher import AES

from .keccak import keccak256

_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")
_AES_BLOCK_SIZE = 16
_DEFAULT_SCRYPT_N = 1 << 18
_DEFAULT_SCRYPT_P = 1
_SCRYPT_R = 8
_DKLEN = 32


class KeystoreError(ValueError):
    """Raised when a keystore document cannot be built or opened."""


def _rand(size: int) -> bytes:
    return os.urandom(size)


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _hex_decode(value: Any) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise KeystoreError(f"expected hex string, got {type(value).__name__}")
    text = value.strip('"')
    if not _HEX_RE.fullmatch(text):
        raise KeystoreError(f"invalid hex string: {text!r}")
    return bytes.fromhex(text)


def _field(obj: Any, name: str) -> Any:
    """Look up a JSON member, preferring an exact match over a case-insensitive one."""
    if not isinstance(obj, dict):
        raise KeystoreError(f"expected a JSON object holding {name!r}")
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if key.lower() == lowered:
            return value
    return None


def _int_field(obj: Any, name: str) -> int:
    value = _field(obj, name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise KeystoreError(f"field {name!r} must be an integer")
    return value


def _loads(content: str | bytes | dict) -> Any:
    if isinstance(content, dict):
        return content
    try:
        return json.loads(_to_bytes(content).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise KeystoreError(f"invalid keystore json: {exc}") from exc


def _dumps(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def aes_ctr(key: bytes, data: bytes, iv: bytes) -> bytes:
    """Apply AES in counter mode, using the whole IV as the initial counter block."""
    try:
        cipher = AES.new(bytes(key), AES.MODE_CTR, nonce=b"", initial_value=bytes(iv))
    except (ValueError, TypeError) as exc:
        raise KeystoreError(f"aes-ctr: {exc}") from exc
    return cipher.encrypt(bytes(data))


def _scrypt(password: bytes, salt: bytes, n: int, r: int, p: int, dklen: int) -> bytes:
    maxmem = 128 * r * (n + p + 2) + (1 << 20)
    try:
        return hashlib.scrypt(password, salt=salt, n=n, r=r, p=p, dklen=dklen, maxmem=maxmem)
    except (ValueError, OverflowError, MemoryError) as exc:
        raise KeystoreError(f"scrypt: {exc}") from exc


def _scrypt_params(salt: bytes, n: int, p: int) -> dict[str, Any]:
    return {"dklen": _DKLEN, "salt": salt.hex(), "n": n, "p": p, "r": _SCRYPT_R}


def apply_kdf(function: str, password: str | bytes, params: Any) -> bytes:
    """Derive a key with the named function ("pbkdf2" or "scrypt") and its parameters."""
    password = _to_bytes(password)
    if function not in ("pbkdf2", "scrypt"):
        raise KeystoreError(f"kdf '{function}' not supported")
    if params is None:
        raise KeystoreError("kdf parameters are missing")
    if isinstance(params, (str, bytes, bytearray)):
        params = _loads(params)
    if not isinstance(params, dict):
        raise KeystoreError("kdf parameters must be a JSON object")

    salt = _hex_decode(_field(params, "salt"))
    dklen = _int_field(params, "dklen")
    if function == "pbkdf2":
        if _field(params, "prf") != "hmac-sha256":
            raise KeystoreError("not found")
        try:
            return hashlib.pbkdf2_hmac(
                "sha256", password, salt, _int_field(params, "c"), dklen or None
            )
        except (ValueError, OverflowError) as exc:
            raise KeystoreError(f"pbkdf2: {exc}") from exc
    return _scrypt(
        password,
        salt,
        _int_field(params, "n"),
        _int_field(params, "r"),
        _int_field(params, "p"),
        dklen,
    )


def _checked_key(key: bytes) -> bytes:
    if len(key) < 32:
        raise KeystoreError(f"derived key too short: {len(key)} bytes")
    return key


def encrypt_v3(
    content: bytes,
    password: str,
    scrypt_n: int = _DEFAULT_SCRYPT_N,
    scrypt_p: int = _DEFAULT_SCRYPT_P,
) -> bytes:
    """Encrypt ``content`` into a version 3 keystore JSON document."""
    iv = _rand(_AES_BLOCK_SIZE)
    salt = _rand(32)
    params = _scrypt_params(salt, scrypt_n, scrypt_p)
    key = _scrypt(_to_bytes(password), salt, scrypt_n, _SCRYPT_R, scrypt_p, _DKLEN)

    cipher_text = aes_ctr(key[:16], content, iv)
    mac = keccak256(key[16:32], cipher_text)

    document = {
        "id": "",
        "version": 3,
        "crypto": {
            "cipher": "aes-128-ctr",
            "cipherparams": {"IV": iv.hex()},
            "ciphertext": cipher_text.hex(),
            "kdf": "scrypt",
            "KDFParams": params,
            "kdfparams": params,
            "mac": mac.hex(),
        },
    }
    return _dumps(document)


def decrypt_v3(content: str | bytes, password: str) -> bytes:
    """Decrypt a version 3 keystore JSON document."""
    document = _loads(content)
    if _field(document, "version") != 3:
        raise KeystoreError("only version 3 supported")
    crypto = _field(document, "crypto")
    if not isinstance(crypto, dict):
        raise KeystoreError("crypto section is missing")

    cipher_name = _field(crypto, "cipher")
    if cipher_name != "aes-128-ctr":
        raise KeystoreError(f"cipher {cipher_name} not supported")

    key = _checked_key(
        apply_kdf(_field(crypto, "kdf") or "", _to_bytes(password), _field(crypto, "kdfparams"))
    )

    cipher_text = _hex_decode(_field(crypto, "ciphertext"))
    mac = keccak256(key[16:32], cipher_text)
    if not hmac.compare_digest(mac, _hex_decode(_field(crypto, "mac"))):
        raise KeystoreError("incorrect mac")

    cipher_params = _field(crypto, "cipherparams")
    iv = _hex_decode(_field(cipher_params, "IV")) if cipher_params is not None else b""
    return aes_ctr(key[:16], cipher_text, iv)


def normalize_password(password: str) -> str:
    """NFKD-normalize a password and drop single-byte control characters."""
    normalized = unicodedata.normalize("NFKD", password)
    return "".join(ch for ch in normalized if ord(ch) >= 0x20 and ord(ch) != 0x7F)


def encrypt_v4(content: bytes, password: str) -> bytes:
    """Encrypt ``content`` into a version 4 keystore JSON document."""
    password = normalize_password(password)

    salt = _rand(32)
    kdf_params = _scrypt_params(salt, _DEFAULT_SCRYPT_N, _DEFAULT_SCRYPT_P)
    key = _scrypt(
        _to_bytes(password), salt, _DEFAULT_SCRYPT_N, _SCRYPT_R, _DEFAULT_SCRYPT_P, _DKLEN
    )

    iv = _rand(16)
    cipher_text = aes_ctr(key[:16], content, iv)
    checksum = hashlib.sha256(key[16:32] + cipher_text).digest()

    document = {
        "crypto": {
            "kdf": {"function": "scrypt", "params": kdf_params, "message": ""},
            "checksum": {"function": "sha256", "params": None, "message": checksum.hex()},
            "cipher": {
                "function": "aes-128-ctr",
                "params": {"iv": iv.hex()},
                "message": cipher_text.hex(),
            },
        },
        "description": "",
        "pubkey": "",
        "path": "",
        "version": 4,
        "uuid": "",
    }
    return _dumps(document)


def _module(crypto: Any, name: str) -> dict[str, Any]:
    module = _field(crypto, name)
    if not isinstance(module, dict):
        raise KeystoreError(f"{name} module is missing")
    return module


def decrypt_v4(content: str | bytes, password: str) -> bytes:
    """Decrypt a version 4 keystore JSON document."""
    document = _loads(content)
    if _field(document, "version") != 4:
        raise KeystoreError("only version 4 supported")
    crypto = _field(document, "crypto")
    if not isinstance(crypto, dict):
        raise KeystoreError("crypto section is missing")

    password = normalize_password(password)

    kdf = _module(crypto, "kdf")
    key = _checked_key(
        apply_kdf(_field(kdf, "function") or "", _to_bytes(password), _field(kdf, "params"))
    )

    cipher = _module(crypto, "cipher")
    cipher_text = _hex_decode(_field(cipher, "message"))
    checksum = hashlib.sha256(key[16:32] + cipher_text).digest()
    expected = _hex_decode(_field(_module(crypto, "checksum"), "message"))
    if not hmac.compare_digest(checksum, expected):
        raise KeystoreError("bad checksum")

    function = _field(cipher, "function")
    if function != "aes-128-ctr":
        raise KeystoreError(f"cipher '{function}' not supported")
    params = _field(cipher, "params")
    if params is None:
        raise KeystoreError("cipher parameters are missing")
    if isinstance(params, (str, bytes, bytearray)):
        params = _loads(params)
    iv = _hex_decode(_field(params, "iv"))
    return aes_ctr(key[:16], cipher_text, iv)