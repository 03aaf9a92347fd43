"""Pytest configuration and fixtures."""

import json
from typing import Any

import pytest

from pushauth.auth.credentials import Credentials
from pushauth.common.settings import Settings

APP_ID = "3"
APP_KEY = "278d425bdf160c739803"
APP_SECRET = "7ad3773142a6692b25b8"


class FixedOrderEncoder:
    """Encodes presence user data with a fixed field order."""

    def encode(self, data: dict[str, Any]) -> bytes:
        info = ",".join(f"{json.dumps(k)}:{json.dumps(v)}" for k, v in data["user_info"].items())
        return f'{{"user_id":{json.dumps(data["user_id"])},"user_info":{{{info}}}}}'.encode("utf-8")


@pytest.fixture
def credentials() -> Credentials:
    """Credentials from the public API documentation."""
    return Credentials.create(APP_KEY, APP_SECRET, app_id=APP_ID)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        app_id=APP_ID,
        app_key=APP_KEY,
        app_secret=APP_SECRET,
        auth_timestamp_ttl_seconds=600,
    )


@pytest.fixture
def socket_id() -> str:
    return "1234.1234"


@pytest.fixture
def presence_user() -> dict[str, Any]:
    return {"user_id": "10", "user_info": {"name": "Mr. Pusher"}}


@pytest.fixture
def fixed_encoder() -> FixedOrderEncoder:
    return FixedOrderEncoder()
