"""
Login endpoints.

Every route is a thin adapter between the browser and AuthService: it reads
request parameters and the ambient session, calls the coordinator, and turns
the outcome into JSON or a redirect back to the frontend.
"""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse

from authbridge.auth.contracts import (
    AuthError,
    AuthorizationUrlError,
    ProviderDeniedError,
    SessionNotFoundError,
    SessionStoreError,
    UnknownProviderError,
)
from authbridge.auth.service import AuthService
from authbridge.auth.storage import StateStore
from authbridge.auth.url_utils import URLBuilder
from authbridge.config.models import AuthSettingsModel

from .models import (
    AuthUrlResponse,
    ErrorResponse,
    IdentityResponse,
    LogoutResponse,
    ProviderInfo,
    ProvidersResponse,
)
from .session import (
    forget_auth_session,
    get_auth_session_id,
    pop_pending_state,
    remember_login,
    set_auth_session_id,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: AuthError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error.description, reason=error.reason).model_dump(
            by_alias=True
        ),
    )


def create_auth_router(
    auth_service: AuthService,
    *,
    url_builder: URLBuilder,
    state_store: StateStore,
    settings: AuthSettingsModel,
) -> APIRouter:
    """
    Create the login router.

    Args:
        auth_service: The coordinator holding the provider registry and session store
        url_builder: Resolves the public base URL used for callbacks and redirects
        state_store: Server-side store of pending login states
        settings: Route prefix, frontend URL and state lifetime

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix=settings.route_prefix, tags=["auth"])

    def frontend_redirect(request: Request, **params: str) -> RedirectResponse:
        target = settings.frontend_url or url_builder.build_url("/", request)
        separator = "&" if "?" in target else "?"
        return RedirectResponse(f"{target}{separator}{urlencode(params)}", status_code=302)

    @router.get("/providers", response_model=ProvidersResponse, summary="List login providers")
    async def list_providers() -> ProvidersResponse:
        """Providers with complete configuration, in registration order."""
        return ProvidersResponse(
            providers=[
                ProviderInfo.from_summary(s) for s in auth_service.list_available_providers()
            ]
        )

    @router.get(
        "/me",
        response_model=IdentityResponse,
        responses={401: {"model": ErrorResponse}},
        summary="Current identity",
    )
    async def current_identity(request: Request) -> IdentityResponse | JSONResponse:
        try:
            session = await auth_service.get_session(get_auth_session_id(request))
        except SessionNotFoundError as exc:
            forget_auth_session(request)
            return _error_response(401, exc)
        return IdentityResponse.from_session(session)

    @router.post(
        "/logout",
        response_model=LogoutResponse,
        responses={500: {"model": ErrorResponse}},
        summary="End the current session",
    )
    async def logout(request: Request) -> LogoutResponse | JSONResponse:
        try:
            await auth_service.logout(get_auth_session_id(request))
        except SessionStoreError as exc:
            logger.error(f"Logout failed: {exc}")
            return _error_response(500, exc)
        request.session.clear()
        return LogoutResponse(success=True)

    @router.get(
        "/{provider}",
        response_model=AuthUrlResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        summary="Begin login",
    )
    async def begin_login(provider: str, request: Request) -> AuthUrlResponse | JSONResponse:
        try:
            login = auth_service.begin_login(provider, url_builder.get_base_url(request))
        except UnknownProviderError as exc:
            return _error_response(400, exc)
        except AuthorizationUrlError as exc:
            return _error_response(500, exc)

        await remember_login(
            request, login, state_store, ttl_seconds=settings.state_ttl_seconds
        )
        logger.info(f"Issued {provider} authorize URL")
        return AuthUrlResponse(auth_url=login.authorize_url)

    @router.get("/{provider}/callback", summary="Provider callback")
    async def callback(
        provider: str,
        request: Request,
        code: str | None = None,
        state: str | None = None,
        error: str | None = None,
        error_description: str | None = None,
    ) -> RedirectResponse:
        # Consume first: the pending state is single-use whatever happens next.
        expected_state = await pop_pending_state(request, provider, state_store)

        if error:
            denied = ProviderDeniedError(error_description or error)
            logger.warning(f"{provider} returned an OAuth error: {error} ({denied.description})")
            return frontend_redirect(request, auth="error", reason=denied.description)

        result = await auth_service.complete_login(
            provider,
            code=code,
            expected_state=expected_state,
            presented_state=state,
            callback_base_url=url_builder.get_base_url(request),
        )
        if not result.success or result.session is None:
            reason = result.error.description if result.error else "Authentication failed"
            return frontend_redirect(request, auth="error", reason=reason)

        set_auth_session_id(request, result.session.session_id)
        return frontend_redirect(request, auth="success")

    return router


__all__ = ["create_auth_router"]
