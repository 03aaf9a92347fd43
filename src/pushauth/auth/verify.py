"""Server-side verification of signed REST requests, channel tokens and webhooks."""

from __future__ import annotations

import hmac

from pushauth.auth.channels import format_token
from pushauth.auth.credentials import Credentials
from pushauth.auth.query import (
    AUTH_KEY,
    AUTH_SIGNATURE,
    AUTH_TIMESTAMP,
    AUTH_VERSION,
    AUTH_VERSION_KEY,
    BODY_MD5,
    ParamsInput,
    build_signing_input,
    form_query_string,
    normalize_params,
    sort_params,
)
from pushauth.common.errors import SignatureVerificationError
from pushauth.common.hmac import body_checksum, to_bytes, verify
from pushauth.common.logging import get_logger

logger = get_logger(__name__)


def verify_auth_params(
    credentials: Credentials,
    method: str | bytes,
    path: str | bytes,
    params: ParamsInput,
    body: bytes,
    now: int,
    ttl_seconds: int = 600,
) -> None:
    """
    Verify the auth parameters of a received REST request.

    The canonical query string is re-derived from every received parameter
    except ``auth_signature``, so the check holds for any extra parameters the
    caller signed.

    Args:
        credentials: Credentials of the application the request claims
        method: HTTP method as received
        path: Request path without the query string
        params: Decoded query parameters
        body: Raw request body
        now: Current UNIX timestamp
        ttl_seconds: Max allowed distance between ``auth_timestamp`` and ``now``

    Raises:
        SignatureVerificationError: If any check fails
    """
    received = normalize_params(params)
    values = dict(received)

    signature = values.get(AUTH_SIGNATURE)
    if not signature:
        raise _fail("Missing auth_signature")

    auth_key = values.get(AUTH_KEY)
    if auth_key is None:
        raise _fail("Missing auth_key")
    if not hmac.compare_digest(auth_key, credentials.app_key):
        raise _fail("Unknown auth_key")

    if values.get(AUTH_VERSION_KEY) != AUTH_VERSION:
        raise _fail("Unsupported auth_version")

    raw_timestamp = values.get(AUTH_TIMESTAMP)
    if raw_timestamp is None:
        raise _fail("Missing auth_timestamp")
    try:
        timestamp = int(raw_timestamp)
    except ValueError:
        raise _fail("Invalid auth_timestamp") from None
    if abs(now - timestamp) > ttl_seconds:
        raise _fail("auth_timestamp expired")

    body_md5 = values.get(BODY_MD5)
    if body_md5 is not None and body_md5 != body_checksum(body).encode("ascii"):
        raise _fail("body_md5 does not match body")
    if body_md5 is None and body:
        raise _fail("Missing body_md5")

    signed_params = sort_params(pair for pair in received if pair[0] != AUTH_SIGNATURE)
    signing_input = build_signing_input(method, path, form_query_string(signed_params))
    if not verify(credentials.app_secret, signing_input, signature):
        raise _fail("Invalid auth_signature")


def verify_channel_token(
    credentials: Credentials,
    token: str,
    socket_id: str | bytes,
    channel_name: str | bytes,
    channel_data: str | bytes | None = None,
) -> bool:
    """Check a channel auth token against socket, channel and optional channel data."""
    string_to_sign = to_bytes(socket_id) + b":" + to_bytes(channel_name)
    if channel_data is not None:
        string_to_sign += b":" + to_bytes(channel_data)
    expected = format_token(credentials, string_to_sign)
    return hmac.compare_digest(expected.encode("utf-8"), to_bytes(token))


def verify_webhook(
    credentials: Credentials,
    key: str | bytes,
    signature: str,
    body: bytes,
) -> bool:
    """Check the key and body signature sent with a webhook."""
    if not hmac.compare_digest(to_bytes(key), credentials.app_key):
        logger.warning("Webhook signed with unknown key")
        return False
    return verify(credentials.app_secret, body, signature)


def _fail(reason: str) -> SignatureVerificationError:
    logger.warning("Signed request rejected", reason=reason)
    return SignatureVerificationError(reason)
