"""Client object binding credentials to every signing operation."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from pushauth.auth.channels import (
    DEFAULT_ENCODER,
    UserDataEncoder,
    authenticate_presence_channel_with_encoder,
    authenticate_private_channel,
    channel_auth_response,
)
from pushauth.auth.credentials import Credentials
from pushauth.auth.query import ParamsInput, QueryParam, build_auth_params, encode_query_string
from pushauth.common.logging import get_logger
from pushauth.common.settings import Settings

logger = get_logger(__name__)


class AuthClient:
    """Signs REST requests and channel subscriptions for one application."""

    def __init__(
        self,
        credentials: Credentials,
        base_url: str = "https://api.pusherapp.com",
        encoder: UserDataEncoder | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the client.

        Args:
            credentials: Application credentials
            base_url: Scheme and host used by ``signed_url``
            encoder: Presence user data encoder (compact JSON by default)
            clock: Source of the current UNIX time for REST timestamps
        """
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._encoder = encoder or DEFAULT_ENCODER
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> AuthClient:
        """Create a client from configured credentials and API host."""
        return cls(Credentials.from_settings(settings), base_url=settings.api_base_url, **kwargs)

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def auth_params(
        self,
        method: str,
        path: str,
        params: ParamsInput = None,
        body: bytes = b"",
        timestamp: int | None = None,
    ) -> list[QueryParam]:
        """Signed parameter list for a REST request, stamped with the current time."""
        if timestamp is None:
            timestamp = int(self._clock())
        logger.debug("Signing REST request", method=method, path=path, timestamp=timestamp)
        return build_auth_params(self._credentials, method, path, params, body, timestamp)

    def signed_url(
        self,
        method: str,
        path: str,
        params: ParamsInput = None,
        body: bytes = b"",
        timestamp: int | None = None,
    ) -> str:
        """Full request URL with percent-encoded auth parameters."""
        query = encode_query_string(self.auth_params(method, path, params, body, timestamp))
        return f"{self._base_url}{path}?{query}"

    def authenticate_private(self, socket_id: str, channel_name: str) -> str:
        """Token for a private channel subscription."""
        return authenticate_private_channel(self._credentials, socket_id, channel_name)

    def authenticate_presence(self, socket_id: str, channel_name: str, user_data: Any) -> str:
        """Token for a presence channel subscription, using the client's encoder."""
        return authenticate_presence_channel_with_encoder(
            self._encoder, self._credentials, socket_id, channel_name, user_data
        )

    def channel_auth(
        self,
        socket_id: str,
        channel_name: str,
        user_data: Any = None,
    ) -> dict[str, str]:
        """Response body for a channel auth request."""
        return channel_auth_response(
            self._credentials, socket_id, channel_name, user_data, encoder=self._encoder
        )
