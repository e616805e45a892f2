"""Contracts and shared types for the authbridge authentication engine."""

from __future__ import annotations

from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import Field

from authbridge.models import BridgeBaseModel


class AuthError(Exception):
    """Base error for a single login attempt or session lookup.

    `reason` is a stable machine string that the transport layer forwards to
    the frontend; `description` is the human readable detail.
    """

    reason = "authentication_failed"
    default_status_code = 400

    def __init__(self, description: str | None = None, *, status_code: int | None = None):
        super().__init__(description or self.reason)
        self.description = description or self.reason
        self.status_code: int | None = (
            status_code if status_code is not None else self.default_status_code
        )


class UnknownProviderError(AuthError):
    """The requested provider is not registered."""

    reason = "unknown_provider"

    def __init__(self, provider_name: str):
        super().__init__(f"Provider {provider_name} not available")
        self.provider_name = provider_name


class AuthorizationUrlError(AuthError):
    """A registered adapter could not build its authorize URL."""

    reason = "authorize_url_failed"
    default_status_code = 500


class InvalidStateError(AuthError):
    """Anti-CSRF state was missing, mismatched, expired or replayed."""

    reason = "invalid_state"


class ProviderDeniedError(AuthError):
    """The provider redirected back with an `error` instead of a code."""

    reason = "provider_denied"


class UpstreamError(AuthError):
    """Failure reported by (or while talking to) a provider endpoint.

    `status_code` is the upstream HTTP status, or None when the call never
    produced a response (timeout, connection failure).
    """

    default_status_code = 502

    def __init__(
        self,
        description: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(description)
        self.status_code = status_code
        self.body = body


class TokenExchangeError(UpstreamError):
    """The provider refused or failed the authorization-code exchange."""

    reason = "token_exchange_failed"


class ProfileFetchError(UpstreamError):
    """The provider refused or failed the profile request."""

    reason = "profile_fetch_failed"


class SessionStoreError(AuthError):
    """The session store could not complete an operation."""

    reason = "session_store_failed"
    default_status_code = 500


class SessionNotFoundError(AuthError):
    """No live session exists for the given id."""

    reason = "session_not_found"
    default_status_code = 401


class ProviderDescriptor(BridgeBaseModel):
    """Static description of one configured identity provider."""

    name: str
    display_name: str
    authorize_endpoint: str
    token_endpoint: str
    profile_endpoint: str
    scopes: tuple[str, ...] = ()
    scope_delimiter: Literal[" ", ","] = " "
    client_id: str
    client_secret: str = Field(repr=False)
    color: str = "#000000"
    icon: str = ""
    callback_path: str

    @property
    def scope_string(self) -> str:
        return self.scope_delimiter.join(self.scopes)

    def callback_url(self, callback_base_url: str) -> str:
        """Return the redirect URI registered with the provider."""
        return f"{callback_base_url.rstrip('/')}/{self.callback_path.lstrip('/')}"

    def summary(self) -> ProviderSummary:
        return ProviderSummary(
            name=self.name,
            display_name=self.display_name,
            color=self.color,
            icon=self.icon,
        )


class ProviderSummary(BridgeBaseModel):
    """Public subset of a descriptor, used to render login buttons."""

    name: str
    display_name: str
    color: str
    icon: str


class GrantResult(BridgeBaseModel):
    """Result of exchanging an authorization code with a provider."""

    access_token: str = Field(repr=False)
    refresh_token: str | None = Field(default=None, repr=False)
    expires_in: float | None = None
    token_type: str = "Bearer"
    scope: str | None = None


class NormalizedProfile(BridgeBaseModel):
    """Provider profile mapped onto one canonical identity shape.

    `provider_user_id` is only unique within its provider.
    """

    provider_user_id: str
    name: str
    email: str | None = None
    picture_url: str | None = None
    status_message: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class ProviderAdapter(Protocol):
    """Interface all provider adapters must implement."""

    descriptor: ProviderDescriptor

    @property
    def provider_name(self) -> str: ...

    def build_authorize_url(self, *, callback_base_url: str, state: str) -> str:
        """Compose the provider authorize URL. Pure, no I/O."""

    async def exchange_code(self, *, code: str, callback_base_url: str) -> GrantResult:
        """Exchange an authorization code for provider tokens.

        Raises:
            TokenExchangeError: on any non-2xx response or transport failure.
        """

    async def fetch_profile(self, *, access_token: str) -> NormalizedProfile:
        """Fetch and normalize the profile bound to an access token.

        Raises:
            ProfileFetchError: on any non-2xx response or transport failure.
        """


__all__ = [
    "AuthError",
    "AuthorizationUrlError",
    "GrantResult",
    "InvalidStateError",
    "NormalizedProfile",
    "ProfileFetchError",
    "ProviderAdapter",
    "ProviderDeniedError",
    "ProviderDescriptor",
    "ProviderSummary",
    "SessionNotFoundError",
    "SessionStoreError",
    "TokenExchangeError",
    "UnknownProviderError",
    "UpstreamError",
]
