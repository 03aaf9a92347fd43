"""HMAC signing utilities shared by REST and channel authentication."""

from __future__ import annotations

import hashlib
import hmac


def to_bytes(value: str | bytes) -> bytes:
    """Encode text as UTF-8, passing bytes through untouched."""
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def sign(secret: bytes, message: bytes) -> str:
    """Create a lowercase hex-encoded HMAC-SHA256 signature."""
    return hmac.new(secret, message, hashlib.sha256).hexdigest()


def body_checksum(body: bytes) -> str:
    """MD5 of a request body as lowercase hex.

    Only used as the ``body_md5`` integrity token the API expects, never as a
    signature.
    """
    return hashlib.md5(body).hexdigest()


def verify(secret: bytes, message: bytes, signature: str | bytes) -> bool:
    """Verify HMAC signature in constant time."""
    expected = sign(secret, message).encode("ascii")
    return hmac.compare_digest(expected, to_bytes(signature))
