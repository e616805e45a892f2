"""Google OAuth ProviderAdapter implementation."""

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

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

DEFAULT_SCOPES = ["openid", "email", "profile"]

_MAPPED_FIELDS = {"id", "sub", "name", "email", "picture"}


class _GoogleTokenResponse(BridgeBaseModel):
    """Minimal token endpoint response (successful or error)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: float | None = None
    scope: str | None = None
    token_type: str | None = None

    error: str | None = None
    error_description: str | None = None


class _GoogleUserInfoResponse(BridgeBaseModel):
    """Minimal userinfo response used to normalize the profile."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    sub: str | None = None
    id: str | None = None
    email: str | None = None
    name: str | None = None
    picture: str | None = None

    @property
    def resolved_user_id(self) -> str:
        return self.sub or self.id or ""


class GoogleProviderAdapter(ProviderAdapter):
    """Google OAuth ProviderAdapter that uses real HTTP calls."""

    def __init__(
        self,
        config: ProviderConfigModel,
        *,
        name: str = "google",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.descriptor = ProviderDescriptor(
            name=name,
            display_name=config.display_name or "Google",
            authorize_endpoint=config.auth_url or GOOGLE_AUTH_URL,
            token_endpoint=config.token_url or GOOGLE_TOKEN_URL,
            profile_endpoint=config.profile_url or GOOGLE_USERINFO_URL,
            scopes=tuple(config.scopes or DEFAULT_SCOPES),
            scope_delimiter=" ",
            client_id=config.client_id,
            client_secret=config.client_secret,
            color="#4285F4",
            icon="GoogleIcon",
            callback_path=config.callback_path or f"/auth/{name}/callback",
        )
        self.timeout = timeout

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
        query_string = urlencode(params)
        return f"{self.descriptor.authorize_endpoint}?{query_string}"

    async def exchange_code(self, *, code: str, callback_base_url: str) -> GrantResult:
        payload = {
            "grant_type": "authorization_code",
            "client_id": self.descriptor.client_id,
            "client_secret": self.descriptor.client_secret,
            "code": code,
            "redirect_uri": self.descriptor.callback_url(callback_base_url),
        }

        try:
            async with create_http_client(self.timeout) as client:
                resp = await client.post(
                    self.descriptor.token_endpoint,
                    data=payload,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as exc:
            raise TokenExchangeError(f"Google token request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("Google token exchange failed: %s", resp.status_code)
            raise TokenExchangeError(
                f"Token exchange failed: {resp.status_code}",
                status_code=resp.status_code,
                body=response_text(resp),
            )

        try:
            token = _GoogleTokenResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise TokenExchangeError(
                "Invalid token response payload",
                status_code=resp.status_code,
                body=response_text(resp),
            ) from exc

        if token.error is not None:
            raise TokenExchangeError(
                token.error_description or token.error,
                status_code=resp.status_code,
                body=response_text(resp),
            )

        if not token.access_token:
            raise TokenExchangeError("No access_token in response", status_code=resp.status_code)

        return GrantResult(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_in=token.expires_in,
            token_type=token.token_type or "Bearer",
            scope=token.scope,
        )

    async def fetch_profile(self, *, access_token: str) -> NormalizedProfile:
        try:
            async with create_http_client(self.timeout) as client:
                resp = await client.get(
                    self.descriptor.profile_endpoint,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as exc:
            raise ProfileFetchError(f"Google userinfo request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("Google profile fetch failed: %s", resp.status_code)
            raise ProfileFetchError(
                f"Profile fetch failed: {resp.status_code}",
                status_code=resp.status_code,
                body=response_text(resp),
            )

        try:
            data: dict[str, Any] = resp.json()
            parsed = _GoogleUserInfoResponse.model_validate(data)
        except (ValueError, ValidationError) as exc:
            raise ProfileFetchError(
                "Invalid userinfo payload", status_code=resp.status_code
            ) from exc

        user_id = parsed.resolved_user_id
        if not user_id:
            raise ProfileFetchError("Google profile missing id", status_code=resp.status_code)

        # Google omits `name` for accounts without a profile; fall back to the mailbox.
        name = parsed.name or (parsed.email.split("@")[0] if parsed.email else user_id)

        return NormalizedProfile(
            provider_user_id=user_id,
            name=name,
            email=parsed.email,
            picture_url=parsed.picture,
            metadata={k: v for k, v in data.items() if k not in _MAPPED_FIELDS},
        )


__all__ = ["GoogleProviderAdapter"]
