"""Auth Server - Channel authentication endpoint and signed REST sink."""

import json
import re
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import parse_qsl

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
import uvicorn

from pushauth.auth.channels import UserDataEncoder, channel_auth_response
from pushauth.auth.credentials import Credentials
from pushauth.common.auth import SignedRequestMiddleware
from pushauth.common.errors import ErrorCode, error_response
from pushauth.common.http import RequestIdMiddleware
from pushauth.common.logging import get_logger, setup_logging
from pushauth.common.settings import Settings, get_settings

logger = get_logger(__name__)

PRIVATE_PREFIX = "private-"
PRESENCE_PREFIX = "presence-"

SOCKET_ID_PATTERN = re.compile(r"^\d+\.\d+\Z")
CHANNEL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-=@,.;]+\Z")

UserResolver = Callable[[Request], Awaitable[dict[str, Any] | None]]


async def header_user_resolver(request: Request) -> dict[str, Any] | None:
    """
    Resolve presence user data from request headers.

    ``X-User-Id`` carries the user ID and the optional ``X-User-Info`` header a
    JSON object of user attributes. Deployments behind a real session layer
    pass their own resolver to ``create_app``.
    """
    user_id = request.headers.get("X-User-Id")
    if not user_id:
        return None
    user_data: dict[str, Any] = {"user_id": user_id}
    user_info = request.headers.get("X-User-Info")
    if user_info:
        user_data["user_info"] = json.loads(user_info)
    return user_data


async def _read_fields(request: Request) -> dict[str, Any]:
    body = await request.body()
    if request.headers.get("content-type", "").startswith("application/json"):
        data = json.loads(body or b"{}")
        if not isinstance(data, dict):
            raise json.JSONDecodeError("Expected a JSON object", body.decode("utf-8", "replace"), 0)
        return data
    return dict(parse_qsl(body.decode("utf-8")))


class AuthServer:
    """Channel auth and signed-request handlers bound to one application."""

    def __init__(
        self,
        credentials: Credentials,
        user_resolver: UserResolver = header_user_resolver,
        encoder: UserDataEncoder | None = None,
    ):
        self._credentials = credentials
        self._user_resolver = user_resolver
        self._encoder = encoder

    async def handle_channel_auth(self, request: Request) -> JSONResponse:
        """Issue a channel token for a realtime client subscription."""
        try:
            fields = await _read_fields(request)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return error_response(ErrorCode.INVALID_JSON, "Invalid request body", 400)

        socket_id = fields.get("socket_id")
        channel_name = fields.get("channel_name")
        if not socket_id or not channel_name:
            return error_response(
                ErrorCode.MISSING_FIELD,
                "socket_id and channel_name are required",
                400,
            )
        if not isinstance(socket_id, str) or not SOCKET_ID_PATTERN.match(socket_id):
            return error_response(ErrorCode.BAD_REQUEST, "Invalid socket_id", 400)
        if not isinstance(channel_name, str) or not CHANNEL_NAME_PATTERN.match(channel_name):
            return error_response(ErrorCode.BAD_REQUEST, "Invalid channel_name", 400)

        if channel_name.startswith(PRIVATE_PREFIX):
            logger.info("Authorized private channel", channel=channel_name, socket_id=socket_id)
            return JSONResponse(channel_auth_response(self._credentials, socket_id, channel_name))

        if channel_name.startswith(PRESENCE_PREFIX):
            try:
                user_data = await self._user_resolver(request)
            except json.JSONDecodeError:
                return error_response(ErrorCode.INVALID_JSON, "Invalid user info", 400)
            if user_data is None:
                return error_response(ErrorCode.FORBIDDEN, "No user for presence channel", 403)

            logger.info(
                "Authorized presence channel",
                channel=channel_name,
                socket_id=socket_id,
                user_id=user_data.get("user_id"),
            )
            return JSONResponse(
                channel_auth_response(
                    self._credentials,
                    socket_id,
                    channel_name,
                    user_data,
                    encoder=self._encoder,
                )
            )

        return error_response(
            ErrorCode.BAD_REQUEST,
            f"Channel does not require authentication: {channel_name}",
            400,
        )

    async def handle_events(self, request: Request) -> JSONResponse:
        """Accept a signed event publish request."""
        app_id = request.path_params["app_id"]
        if self._credentials.app_id is not None and app_id != self._credentials.app_id:
            return error_response(ErrorCode.FORBIDDEN, f"Unknown app: {app_id}", 403)

        try:
            payload = json.loads(await request.body() or b"{}")
        except json.JSONDecodeError:
            return error_response(ErrorCode.INVALID_JSON, "Invalid JSON body", 400)
        if not isinstance(payload, dict):
            return error_response(ErrorCode.INVALID_JSON, "Expected a JSON object", 400)

        logger.info(
            "Received signed event",
            app_id=app_id,
            event_name=payload.get("name"),
            channels=payload.get("channels"),
        )
        return JSONResponse({})

    async def handle_health(self, request: Request) -> JSONResponse:
        """Health check."""
        return JSONResponse({"status": "healthy"})


def create_app(
    settings: Settings | None = None,
    credentials: Credentials | None = None,
    user_resolver: UserResolver = header_user_resolver,
    encoder: UserDataEncoder | None = None,
) -> Starlette:
    """Create the Starlette application."""
    settings = settings or get_settings()
    credentials = credentials or Credentials.from_settings(settings)
    server = AuthServer(credentials, user_resolver=user_resolver, encoder=encoder)

    routes = [
        Route(settings.auth_endpoint_path, server.handle_channel_auth, methods=["POST"]),
        Route("/apps/{app_id}/events", server.handle_events, methods=["POST"]),
        Route("/health", server.handle_health, methods=["GET"]),
    ]

    app = Starlette(routes=routes)

    app.add_middleware(SignedRequestMiddleware, settings=settings, credentials=credentials)
    app.add_middleware(RequestIdMiddleware)

    return app


def main():
    """Entry point for the auth server."""
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
