"""REST request signing and channel authentication."""

from pushauth.auth.channels import (
    JsonUserDataEncoder,
    UserDataEncoder,
    authenticate_presence_channel,
    authenticate_presence_channel_with_encoder,
    authenticate_private_channel,
    channel_auth_response,
)
from pushauth.auth.credentials import Credentials
from pushauth.auth.query import build_auth_params, encode_query_string
from pushauth.auth.verify import verify_auth_params, verify_channel_token, verify_webhook

__all__ = [
    "Credentials",
    "JsonUserDataEncoder",
    "UserDataEncoder",
    "authenticate_presence_channel",
    "authenticate_presence_channel_with_encoder",
    "authenticate_private_channel",
    "build_auth_params",
    "channel_auth_response",
    "encode_query_string",
    "verify_auth_params",
    "verify_channel_token",
    "verify_webhook",
]
