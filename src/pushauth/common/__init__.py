"""Common utilities for pushauth."""

from pushauth.common.hmac import body_checksum, sign, verify
from pushauth.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "sign",
    "verify",
    "body_checksum",
]
