"""Facebook Login ProviderAdapter implementation.

Facebook differs from the other providers in three ways:

- The token endpoint is called with GET and query parameters.
- Scopes are comma separated.
- The profile is read from the Graph API with an explicit `fields` list and
  the access token passed as a query parameter.

`email` is not requested by default: it requires the app to pass Facebook's
app review. Add `email` to the configured scopes to request it.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import ConfigDict, ValidationError

from authbridge.models import BridgeBaseModel

from ..contracts import (
    GrantResult,
    NormalizedProfile,
    ProfileFetchError,
    ProviderAdapter,
    ProviderDescriptor,
    TokenExchangeError,
)
from ..http import DEFAULT_TIMEOUT_SECONDS, create_http_client, response_text
from ..models import ProviderConfigModel

logger = logging.getLogger(__name__)

FACEBOOK_AUTH_URL = "https://www.facebook.com/v18.0/dialog/oauth"
FACEBOOK_TOKEN_URL = "https://graph.facebook.com/v18.0/oauth/access_token"
FACEBOOK_PROFILE_URL = "https://graph.facebook.com/me"

DEFAULT_SCOPES = ["public_profile"]

_BASE_FIELDS = ["id", "name", "picture.type(large)"]
_MAPPED_FIELDS = {"id", "name", "email", "picture"}


class _FacebookTokenResponse(BridgeBaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str | None = None
    expires_in: float | None = None
    token_type: str | None = None

    # Graph API errors are objects: {"message": ..., "type": ..., "code": ...}
    error: dict[str, Any] | None = None


class _FacebookProfileResponse(BridgeBaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str | None = None
    name: str | None = None
    email: str | None = None
    picture: dict[str, Any] | None = None

    @property
    def picture_url(self) -> str | None:
        data = (self.picture or {}).get("data") or {}
        url = data.get("url")
        return str(url) if url else None


class FacebookProviderAdapter(ProviderAdapter):
    """Facebook Login adapter backed by the Graph API."""

    def __init__(
        self,
        config: ProviderConfigModel,
        *,
        name: str = "facebook",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.descriptor = ProviderDescriptor(
            name=name,
            display_name=config.display_name or "Facebook",
            authorize_endpoint=config.auth_url or FACEBOOK_AUTH_URL,
            token_endpoint=config.token_url or FACEBOOK_TOKEN_URL,
            profile_endpoint=config.profile_url or FACEBOOK_PROFILE_URL,
            scopes=tuple(config.scopes or DEFAULT_SCOPES),
            scope_delimiter=",",
            client_id=config.client_id,
            client_secret=config.client_secret,
            color="#1877F2",
            icon="SiFacebook",
            callback_path=config.callback_path or f"/auth/{name}/callback",
        )
        self.timeout = timeout

    @property
    def provider_name(self) -> str:
        return self.descriptor.name

    @property
    def profile_fields(self) -> str:
        fields = list(_BASE_FIELDS)
        if "email" in self.descriptor.scopes:
            fields.insert(2, "email")
        return ",".join(fields)

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
        params = {
            "client_id": self.descriptor.client_id,
            "client_secret": self.descriptor.client_secret,
            "redirect_uri": self.descriptor.callback_url(callback_base_url),
            "code": code,
        }

        try:
            async with create_http_client(self.timeout) as client:
                resp = await client.get(self.descriptor.token_endpoint, params=params)
        except httpx.HTTPError as exc:
            raise TokenExchangeError(f"Facebook token request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("Facebook token exchange failed: %s", resp.status_code)
            raise TokenExchangeError(
                f"Token exchange failed: {resp.status_code}",
                status_code=resp.status_code,
                body=response_text(resp),
            )

        try:
            token = _FacebookTokenResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise TokenExchangeError(
                "Invalid token response payload",
                status_code=resp.status_code,
                body=response_text(resp),
            ) from exc

        if token.error is not None:
            raise TokenExchangeError(
                str(token.error.get("message") or "Failed to exchange code"),
                status_code=resp.status_code,
                body=response_text(resp),
            )
        if not token.access_token:
            raise TokenExchangeError("No access_token in response", status_code=resp.status_code)

        # Facebook issues no refresh tokens; long-lived tokens come from a separate exchange.
        return GrantResult(
            access_token=token.access_token,
            expires_in=token.expires_in,
            token_type=token.token_type or "bearer",
        )

    async def fetch_profile(self, *, access_token: str) -> NormalizedProfile:
        params = {"fields": self.profile_fields, "access_token": access_token}

        try:
            async with create_http_client(self.timeout) as client:
                resp = await client.get(self.descriptor.profile_endpoint, params=params)
        except httpx.HTTPError as exc:
            raise ProfileFetchError(f"Facebook profile request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("Facebook profile fetch failed: %s", resp.status_code)
            raise ProfileFetchError(
                f"Profile fetch failed: {resp.status_code}",
                status_code=resp.status_code,
                body=response_text(resp),
            )

        try:
            data: dict[str, Any] = resp.json()
            profile = _FacebookProfileResponse.model_validate(data)
        except (ValueError, ValidationError) as exc:
            raise ProfileFetchError(
                "Invalid profile payload", status_code=resp.status_code
            ) from exc

        if not profile.id:
            raise ProfileFetchError("Facebook profile missing id", status_code=resp.status_code)

        return NormalizedProfile(
            provider_user_id=profile.id,
            name=profile.name or profile.id,
            email=profile.email,
            picture_url=profile.picture_url,
            metadata={k: v for k, v in data.items() if k not in _MAPPED_FIELDS},
        )


__all__ = ["FacebookProviderAdapter"]
