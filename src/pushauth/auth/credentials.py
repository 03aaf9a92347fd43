"""Application credentials shared by every signing operation."""

from __future__ import annotations

from dataclasses import dataclass, field

from pushauth.common.errors import ConfigurationError
from pushauth.common.hmac import to_bytes
from pushauth.common.settings import Settings


@dataclass(frozen=True)
class Credentials:
    """Application key and secret.

    The key identifies the application publicly; the secret is only ever used
    as the HMAC key and is kept out of ``repr``.
    """

    app_key: bytes
    app_secret: bytes = field(repr=False)
    app_id: str | None = None

    @classmethod
    def create(
        cls,
        app_key: str | bytes,
        app_secret: str | bytes,
        app_id: str | None = None,
    ) -> Credentials:
        """Build credentials from text or raw bytes."""
        return cls(app_key=to_bytes(app_key), app_secret=to_bytes(app_secret), app_id=app_id)

    @classmethod
    def from_settings(cls, settings: Settings) -> Credentials:
        """Build credentials from configuration.

        Raises:
            ConfigurationError: If the key or secret is not configured
        """
        if not settings.app_key or not settings.app_secret:
            raise ConfigurationError("app_key and app_secret must be configured")
        return cls.create(settings.app_key, settings.app_secret, app_id=settings.app_id)

    @property
    def key(self) -> str:
        """Application key as text."""
        return self.app_key.decode("utf-8")
