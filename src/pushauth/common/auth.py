"""Signature verification middleware for signed REST requests."""

from __future__ import annotations

import time
from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from pushauth.auth.credentials import Credentials
from pushauth.auth.verify import verify_auth_params
from pushauth.common.errors import ErrorCode, SignatureVerificationError, error_response
from pushauth.common.logging import get_logger
from pushauth.common.settings import Settings

logger = get_logger(__name__)


class SignedRequestMiddleware(BaseHTTPMiddleware):
    """Reject requests under the signed path prefixes unless their auth params verify."""

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        credentials: Credentials,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(app)
        self._credentials = credentials
        self._prefixes = tuple(settings.signed_path_prefixes)
        self._exempt_paths = set(settings.auth_exempt_paths)
        self._ttl_seconds = settings.auth_timestamp_ttl_seconds
        self._clock = clock

    def _requires_signature(self, path: str) -> bool:
        if path in self._exempt_paths:
            return False
        return path.startswith(self._prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not self._requires_signature(path):
            return await call_next(request)

        body = await request.body()
        try:
            verify_auth_params(
                self._credentials,
                request.method,
                path,
                request.query_params.multi_items(),
                body,
                now=int(self._clock()),
                ttl_seconds=self._ttl_seconds,
            )
        except SignatureVerificationError as exc:
            return error_response(ErrorCode.INVALID_SIGNATURE, exc.message, exc.status_code)

        logger.debug("Signed request verified", method=request.method, path=path)
        return await call_next(request)
