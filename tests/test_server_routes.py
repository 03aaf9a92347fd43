"""Tests for the auth server routes and signature middleware."""

import json
import time
from urllib.parse import urlencode

import pytest
from starlette.testclient import TestClient

from pushauth.auth.query import build_auth_params, encode_query_string
from pushauth.server.main import create_app

PRIVATE_SIGNATURE = "58df8b0c36d6982b82c3ecf6b4662e34fe8c25bba48f5369f135bf843651c3a4"


@pytest.fixture
def client(settings, credentials):
    app = create_app(settings, credentials=credentials)
    with TestClient(app) as test_client:
        yield test_client


class TestChannelAuthEndpoint:
    """Test the channel auth endpoint."""

    def test_private_channel_form(self, client):
        resp = client.post(
            "/pusher/auth",
            content=urlencode({"socket_id": "1234.1234", "channel_name": "private-foobar"}),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"auth": f"278d425bdf160c739803:{PRIVATE_SIGNATURE}"}

    def test_private_channel_json(self, client):
        resp = client.post(
            "/pusher/auth",
            json={"socket_id": "1234.1234", "channel_name": "private-foobar"},
        )
        assert resp.status_code == 200
        assert resp.json()["auth"].endswith(PRIVATE_SIGNATURE)

    def test_presence_channel(self, client):
        resp = client.post(
            "/pusher/auth",
            json={"socket_id": "1234.1234", "channel_name": "presence-foobar"},
            headers={"X-User-Id": "10", "X-User-Info": json.dumps({"name": "Mr. Pusher"})},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["channel_data"] == '{"user_id":"10","user_info":{"name":"Mr. Pusher"}}'
        assert body["auth"] == (
            "278d425bdf160c739803:48dac51d2d7569e1e9c0f48c227d4b26f238fa68e5c0bb04222c966909c4f7c4"
        )

    def test_presence_without_user(self, client):
        resp = client.post(
            "/pusher/auth",
            json={"socket_id": "1234.1234", "channel_name": "presence-foobar"},
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"

    def test_presence_invalid_user_info(self, client):
        resp = client.post(
            "/pusher/auth",
            json={"socket_id": "1234.1234", "channel_name": "presence-foobar"},
            headers={"X-User-Id": "10", "X-User-Info": "{not json"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_json"

    def test_missing_fields(self, client):
        resp = client.post("/pusher/auth", json={"socket_id": "1234.1234"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_field"

    def test_public_channel_rejected(self, client):
        resp = client.post(
            "/pusher/auth",
            json={"socket_id": "1234.1234", "channel_name": "news"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "bad_request"

    def test_invalid_json_body(self, client):
        resp = client.post(
            "/pusher/auth",
            content=b"[1, 2",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400

    def test_socket_id_with_separators_rejected(self, client, credentials):
        """Test a socket_id smuggling a presence payload gets no token."""
        resp = client.post(
            "/pusher/auth",
            json={
                "socket_id": '123.456:presence-room:{"user_id":"admin","z":"',
                "channel_name": 'private-q"}',
            },
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Invalid socket_id"
        assert "auth" not in resp.json()

    @pytest.mark.parametrize("socket_id", [None, 123.456, ["1.1"], "abc", "1.1\n", "1.1:x"])
    def test_malformed_socket_id_rejected(self, client, socket_id):
        resp = client.post(
            "/pusher/auth",
            json={"socket_id": socket_id, "channel_name": "private-foobar"},
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize("channel_name", [123, "private-a:b", 'private-q"}', "private- x"])
    def test_malformed_channel_name_rejected(self, client, channel_name):
        resp = client.post(
            "/pusher/auth",
            json={"socket_id": "1234.1234", "channel_name": channel_name},
        )
        assert resp.status_code == 400
        assert "auth" not in resp.json()

    def test_custom_user_resolver(self, settings, credentials):
        async def resolver(request):
            return {"user_id": "42"}

        app = create_app(settings, credentials=credentials, user_resolver=resolver)
        with TestClient(app) as test_client:
            resp = test_client.post(
                "/pusher/auth",
                json={"socket_id": "1.1", "channel_name": "presence-room"},
            )
        assert resp.status_code == 200
        assert resp.json()["channel_data"] == '{"user_id":"42"}'


class TestSignedRequests:
    """Test signature verification of REST requests."""

    def _signed_path(self, credentials, path, body, timestamp=None, method="POST"):
        params = build_auth_params(
            credentials, method, path, None, body, timestamp or int(time.time())
        )
        return f"{path}?{encode_query_string(params)}"

    def test_signed_event_accepted(self, client, credentials):
        body = b'{"name":"foo","channels":["project-3"],"data":"{}"}'
        resp = client.post(
            self._signed_path(credentials, "/apps/3/events", body),
            content=body,
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 200
        assert resp.json() == {}
        assert resp.headers["X-Request-ID"]

    def test_unsigned_event_rejected(self, client):
        resp = client.post("/apps/3/events", json={"name": "foo"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_signature"

    def test_tampered_body_rejected(self, client, credentials):
        path = self._signed_path(credentials, "/apps/3/events", b'{"name":"foo"}')
        resp = client.post(path, content=b'{"name":"bar"}')
        assert resp.status_code == 401
        assert "body_md5" in resp.json()["error"]["message"]

    def test_stale_timestamp_rejected(self, client, credentials):
        path = self._signed_path(credentials, "/apps/3/events", b"{}", timestamp=1000000000)
        resp = client.post(path, content=b"{}")
        assert resp.status_code == 401
        assert "expired" in resp.json()["error"]["message"]

    def test_unknown_app_forbidden(self, client, credentials):
        path = self._signed_path(credentials, "/apps/99/events", b"{}")
        resp = client.post(path, content=b"{}")
        assert resp.status_code == 403

    def test_health_not_signed(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}

    def test_request_id_header(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc"})
        assert resp.headers["X-Request-ID"] == "abc"
