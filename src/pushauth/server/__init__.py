"""HTTP auth server for realtime clients and signed REST requests."""

from pushauth.server.main import create_app

__all__ = ["create_app"]
