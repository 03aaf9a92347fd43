"""Auth tokens for private and presence channel subscriptions.

Realtime clients present a token of the form ``app_key:signature`` when
subscribing. The signature covers::

    private:   SOCKET_ID ":" CHANNEL_NAME
    presence:  SOCKET_ID ":" CHANNEL_NAME ":" ENCODED_USER_DATA
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from pushauth.auth.credentials import Credentials
from pushauth.common.hmac import sign, to_bytes


class UserDataEncoder(Protocol):
    """Serializes presence user data into the bytes that get signed.

    Output must be UTF-8: it is sent back to realtime clients as the
    ``channel_data`` string.
    """

    def encode(self, data: Any) -> bytes: ...


class JsonUserDataEncoder:
    """Compact JSON encoding of presence user data.

    Field order follows the input mapping, so the output is only reproducible
    if the caller builds the mapping in a fixed order. Pass ``sort_keys=True``
    or a custom encoder when byte-exact output matters.
    """

    def __init__(self, sort_keys: bool = False) -> None:
        self._sort_keys = sort_keys

    def encode(self, data: Any) -> bytes:
        return json.dumps(data, separators=(",", ":"), sort_keys=self._sort_keys).encode("utf-8")


DEFAULT_ENCODER: UserDataEncoder = JsonUserDataEncoder()


def format_token(credentials: Credentials, string_to_sign: bytes) -> str:
    """Sign bytes and prefix the signature with the application key."""
    signature = sign(credentials.app_secret, string_to_sign)
    return f"{credentials.key}:{signature}"


def authenticate_private_channel(
    credentials: Credentials,
    socket_id: str | bytes,
    channel_name: str | bytes,
) -> str:
    """Generate an ``app_key:signature`` token for a private channel."""
    return format_token(credentials, to_bytes(socket_id) + b":" + to_bytes(channel_name))


def authenticate_presence_channel_with_encoder(
    encoder: UserDataEncoder,
    credentials: Credentials,
    socket_id: str | bytes,
    channel_name: str | bytes,
    user_data: Any,
) -> str:
    """
    Generate a presence channel token using a specific user data encoder.

    The encoded user data is part of the signed bytes, so the realtime client
    must send exactly the same encoding as its ``channel_data``.

    Args:
        encoder: Serializer for ``user_data``
        credentials: Application credentials
        socket_id: Socket ID assigned on connection
        channel_name: Presence channel name
        user_data: User ID and info attached to the subscription

    Returns:
        Token string ``app_key:signature``
    """
    return format_token(
        credentials,
        b":".join([to_bytes(socket_id), to_bytes(channel_name), encoder.encode(user_data)]),
    )


def authenticate_presence_channel(
    credentials: Credentials,
    socket_id: str | bytes,
    channel_name: str | bytes,
    user_data: Any,
) -> str:
    """Generate a presence channel token, encoding user data as JSON."""
    return authenticate_presence_channel_with_encoder(
        DEFAULT_ENCODER, credentials, socket_id, channel_name, user_data
    )


def channel_auth_response(
    credentials: Credentials,
    socket_id: str | bytes,
    channel_name: str | bytes,
    user_data: Any = None,
    encoder: UserDataEncoder | None = None,
) -> dict[str, str]:
    """
    Build the JSON body returned to a realtime client by a channel auth endpoint.

    Private channels get ``{"auth": token}``. When ``user_data`` is given the
    token is a presence token and ``channel_data`` carries the exact encoded
    bytes that were signed.

    Raises:
        ValueError: If the encoder output is not valid UTF-8
    """
    if user_data is None:
        return {"auth": authenticate_private_channel(credentials, socket_id, channel_name)}

    encoded = (encoder or DEFAULT_ENCODER).encode(user_data)
    try:
        channel_data = encoded.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError("User data encoder must return UTF-8 bytes") from exc

    token = authenticate_presence_channel_with_encoder(
        _Preencoded(encoded), credentials, socket_id, channel_name, user_data
    )
    return {"auth": token, "channel_data": channel_data}


class _Preencoded:
    """Encoder that replays bytes produced earlier."""

    def __init__(self, encoded: bytes) -> None:
        self._encoded = encoded

    def encode(self, data: Any) -> bytes:
        return self._encoded
