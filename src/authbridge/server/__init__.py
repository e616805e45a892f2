"""HTTP transport for authbridge."""

from .app import create_app, create_auth_service

__all__ = ["create_app", "create_auth_service"]
