"""
FastAPI application for authbridge.

The application is assembled explicitly from an AuthService and the loaded
configuration; nothing is created at import time.
"""

import logging
import secrets

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from authbridge.auth.registry import ProviderRegistry
from authbridge.auth.service import AuthService
from authbridge.auth.storage import (
    InMemorySessionStore,
    InMemoryStateStore,
    SessionStore,
    StateStore,
)
from authbridge.auth.url_utils import URLBuilder
from authbridge.config.models import AppConfigModel
from authbridge.version import PACKAGE_VERSION

from .routes import create_auth_router

logger = logging.getLogger(__name__)


def create_auth_service(
    config: AppConfigModel, session_store: SessionStore | None = None
) -> AuthService:
    """Build the provider registry and coordinator described by `config`."""
    registry = ProviderRegistry.from_config(
        config.providers,
        timeout=config.auth.http_timeout_seconds,
        route_prefix=config.auth.route_prefix,
    )
    return AuthService(
        registry=registry,
        session_store=session_store if session_store is not None else InMemorySessionStore(),
        default_session_ttl_seconds=config.auth.default_session_ttl_seconds,
    )


def create_app(
    auth_service: AuthService,
    config: AppConfigModel,
    state_store: StateStore | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        auth_service: The coordinator to expose
        config: Loaded configuration
        state_store: Pending login states; a fresh in-memory store when omitted

    Returns:
        Configured FastAPI application with the login endpoints
    """
    app = FastAPI(
        title="authbridge",
        description="Multi-provider OAuth 2.0 login for single-page frontends.",
        version=PACKAGE_VERSION,
    )

    secret_key = config.session.secret_key
    if not secret_key:
        logger.warning(
            "No session secret configured (session.secret_key or AUTHBRIDGE_SESSION_SECRET). "
            "Using a random key; browser sessions will not survive a restart."
        )
        secret_key = secrets.token_urlsafe(32)

    if not config.auth.frontend_url and not config.transport.base_url:
        logger.warning(
            "Neither auth.frontend_url nor transport.base_url is configured. "
            "Post-login redirects will follow the request Host header."
        )

    if state_store is None:
        state_store = InMemoryStateStore()

    app.add_middleware(
        SessionMiddleware,
        secret_key=secret_key,
        session_cookie=config.session.cookie_name,
        max_age=config.session.max_age_seconds,
        same_site=config.session.same_site,
        https_only=config.session.https_only,
    )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(f"Unhandled exception in authbridge: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "reason": "internal_error"},
        )

    url_builder = URLBuilder(config.transport)
    app.include_router(
        create_auth_router(
            auth_service,
            url_builder=url_builder,
            state_store=state_store,
            settings=config.auth,
        )
    )

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {
            "service": "authbridge",
            "version": PACKAGE_VERSION,
            "providers": ",".join(auth_service.registry.names()),
        }

    app.state.auth_service = auth_service
    app.state.state_store = state_store
    return app


__all__ = ["create_app", "create_auth_service"]
