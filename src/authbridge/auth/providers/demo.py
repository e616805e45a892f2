"""Deterministic demo provider for login flow testing (no network calls)."""

from __future__ import annotations

from urllib.parse import urlencode

from ..contracts import (
    GrantResult,
    NormalizedProfile,
    ProfileFetchError,
    ProviderAdapter,
    ProviderDescriptor,
    TokenExchangeError,
)
from ..models import ProviderConfigModel

DEMO_AUTH_URL = "https://demo.invalid/oauth/authorize"
DEMO_TOKEN_URL = "https://demo.invalid/oauth/token"
DEMO_PROFILE_URL = "https://demo.invalid/profile"


class DemoProviderAdapter(ProviderAdapter):
    """In-process provider adapter used for tests and local demos.

    Accepts exactly one authorization code and always yields the same
    profile. The authorize URL has the same shape as a real provider's.
    """

    def __init__(
        self,
        config: ProviderConfigModel,
        *,
        name: str = "demo",
        expected_code: str = "DEMO_CODE_OK",
        access_token: str = "DEMO_ACCESS_TOKEN",
        expires_in: float | None = 3600,
        user_id: str = "demo-user",
        user_name: str = "Demo User",
        email: str | None = "demo@example.com",
    ):
        self.descriptor = ProviderDescriptor(
            name=name,
            display_name=config.display_name or "Demo",
            authorize_endpoint=config.auth_url or DEMO_AUTH_URL,
            token_endpoint=config.token_url or DEMO_TOKEN_URL,
            profile_endpoint=config.profile_url or DEMO_PROFILE_URL,
            scopes=tuple(config.scopes or ["profile"]),
            scope_delimiter=" ",
            client_id=config.client_id,
            client_secret=config.client_secret,
            color="#6B7280",
            icon="DemoIcon",
            callback_path=config.callback_path or f"/auth/{name}/callback",
        )
        self.expected_code = expected_code
        self.expires_in = expires_in
        self.user_id = user_id
        self.user_name = user_name
        self.email = email
        self._access_token = access_token
        self.exchange_calls = 0
        self.profile_calls = 0

    @property
    def provider_name(self) -> str:
        return self.descriptor.name

    def build_authorize_url(self, *, callback_base_url: str, state: str) -> str:
        params = [
            ("response_type", "code"),
            ("client_id", self.descriptor.client_id),
            ("redirect_uri", self.descriptor.callback_url(callback_base_url)),
            ("scope", self.descriptor.scope_string),
            ("state", state),
        ]
        return f"{self.descriptor.authorize_endpoint}?{urlencode(params)}"

    async def exchange_code(self, *, code: str, callback_base_url: str) -> GrantResult:
        """Return a fixed token when the expected code is presented."""
        self.exchange_calls += 1
        if code != self.expected_code:
            raise TokenExchangeError(
                "Unknown authorization code", status_code=400, body='{"error":"invalid_grant"}'
            )
        return GrantResult(access_token=self._access_token, expires_in=self.expires_in)

    async def fetch_profile(self, *, access_token: str) -> NormalizedProfile:
        """Return the fixed profile for the issued token."""
        self.profile_calls += 1
        if access_token != self._access_token:
            raise ProfileFetchError("Access token not recognized", status_code=401)
        return NormalizedProfile(
            provider_user_id=self.user_id,
            name=self.user_name,
            email=self.email,
            metadata={"demo": True},
        )


__all__ = ["DemoProviderAdapter"]
