"""Shared error types and HTTP error envelopes."""

from __future__ import annotations

from typing import Any

from starlette.responses import JSONResponse


class ErrorCode:
    INVALID_JSON = "invalid_json"
    MISSING_FIELD = "missing_field"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    INVALID_SIGNATURE = "invalid_signature"


class PushAuthError(Exception):
    """Base class for pushauth errors."""


class ConfigurationError(PushAuthError):
    """Credentials or settings are missing or unusable."""


class SignatureVerificationError(PushAuthError):
    """A signed request failed verification."""

    def __init__(self, message: str, status_code: int = 401) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def error_response(
    code: str,
    message: str,
    status_code: int,
) -> JSONResponse:
    payload: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    return JSONResponse(payload, status_code=status_code)
