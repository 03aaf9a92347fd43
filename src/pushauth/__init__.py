"""
pushauth: HMAC request signing and channel authentication.

Signs server-to-server REST calls with a canonical query string and issues
``app_key:signature`` tokens that let realtime clients join private and
presence channels.
"""

from pushauth.auth import (
    Credentials,
    JsonUserDataEncoder,
    UserDataEncoder,
    authenticate_presence_channel,
    authenticate_presence_channel_with_encoder,
    authenticate_private_channel,
    build_auth_params,
)
from pushauth.client import AuthClient
from pushauth.common.hmac import body_checksum, sign

__version__ = "1.0.0"

__all__ = [
    "AuthClient",
    "Credentials",
    "JsonUserDataEncoder",
    "UserDataEncoder",
    "authenticate_presence_channel",
    "authenticate_presence_channel_with_encoder",
    "authenticate_private_channel",
    "body_checksum",
    "build_auth_params",
    "sign",
]
