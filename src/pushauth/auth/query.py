"""Signed query parameters for server-to-server REST requests.

The signing input is::

    METHOD "\\n" PATH "\\n" CANONICAL_QUERY_STRING

where the canonical query string joins every parameter (including the
reserved ``auth_*`` and ``body_md5`` fields) as ``key=value`` pairs with ``&``,
ordered byte-wise by key and without any URL encoding. The resulting
signature is prepended to the parameter list as ``auth_signature``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import quote

from pushauth.auth.credentials import Credentials
from pushauth.common.hmac import body_checksum, sign, to_bytes

QueryParam = tuple[bytes, bytes]
ParamsInput = (
    Mapping[str | bytes, str | bytes] | Iterable[tuple[str | bytes, str | bytes]] | None
)

AUTH_VERSION = b"1.0"

AUTH_KEY = b"auth_key"
AUTH_TIMESTAMP = b"auth_timestamp"
AUTH_VERSION_KEY = b"auth_version"
BODY_MD5 = b"body_md5"
AUTH_SIGNATURE = b"auth_signature"



def normalize_params(params: ParamsInput) -> list[QueryParam]:
    """Turn a mapping or sequence of pairs into a list of byte pairs."""
    if params is None:
        return []
    items = params.items() if isinstance(params, Mapping) else params
    return [(to_bytes(key), to_bytes(value)) for key, value in items]


def sort_params(params: Iterable[QueryParam]) -> list[QueryParam]:
    """
    Order parameters by key, comparing the raw key bytes.

    The ordering is part of the wire contract: the verifying server re-derives
    it independently, so it must not depend on locale or collation. The sort is
    stable, so pairs with equal keys keep their relative order.
    """
    return sorted(params, key=lambda pair: pair[0])


def form_query_string(params: Iterable[QueryParam]) -> bytes:
    """Render parameters as ``k1=v1&k2=v2`` without URL encoding."""
    return b"&".join(key + b"=" + value for key, value in params)


def build_signing_input(method: str | bytes, path: str | bytes, query_string: bytes) -> bytes:
    """Join method, path and canonical query string with newlines."""
    return b"\n".join([to_bytes(method), to_bytes(path), query_string])


def build_auth_params(
    credentials: Credentials,
    method: str | bytes,
    path: str | bytes,
    extra_params: ParamsInput,
    body: bytes,
    timestamp: int,
) -> list[QueryParam]:
    """
    Build the full, signed parameter list for a REST request.

    The method is signed exactly as given; callers control its case. Keys in
    ``extra_params`` must not collide with the reserved auth parameters,
    otherwise the signature will not verify server-side.

    Args:
        credentials: Application credentials
        method: HTTP method, e.g. ``"POST"``
        path: Request path, e.g. ``"/apps/3/events"``
        extra_params: Additional query parameters
        body: Raw request body (``b""`` for none)
        timestamp: UNIX timestamp in seconds, supplied by the caller

    Returns:
        ``auth_signature`` followed by every parameter in signing order
    """
    all_params = sort_params(
        normalize_params(extra_params)
        + [
            (AUTH_KEY, credentials.app_key),
            (AUTH_TIMESTAMP, str(timestamp).encode("ascii")),
            (AUTH_VERSION_KEY, AUTH_VERSION),
            (BODY_MD5, body_checksum(body).encode("ascii")),
        ]
    )
    signing_input = build_signing_input(method, path, form_query_string(all_params))
    signature = sign(credentials.app_secret, signing_input)
    return [(AUTH_SIGNATURE, signature.encode("ascii"))] + all_params


def encode_query_string(params: Iterable[QueryParam]) -> str:
    """Percent-encode an authenticated parameter list for use in a URL."""
    return "&".join(f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in params)
