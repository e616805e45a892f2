"""LINE Login ProviderAdapter implementation."""

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

LINE_AUTH_URL = "https://access.line.me/oauth2/v2.1/authorize"
LINE_TOKEN_URL = "https://api.line.me/oauth2/v2.1/token"
LINE_PROFILE_URL = "https://api.line.me/v2/profile"

DEFAULT_SCOPES = ["profile"]

_MAPPED_FIELDS = {"userId", "displayName", "pictureUrl", "statusMessage"}


class _LineTokenResponse(BridgeBaseModel):
    """Token endpoint response (successful or error)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: float | None = None
    scope: str | None = None
    token_type: str | None = None

    error: str | None = None
    error_description: str | None = None


class _LineProfileResponse(BridgeBaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    userId: str | None = None
    displayName: str | None = None
    pictureUrl: str | None = None
    statusMessage: str | None = None


class LineProviderAdapter(ProviderAdapter):
    """LINE Login v2.1 adapter.

    LINE never returns an email address for the `profile` scope, so profiles
    from this adapter carry `email=None` and expose `status_message`.
    """

    def __init__(
        self,
        config: ProviderConfigModel,
        *,
        name: str = "line",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.descriptor = ProviderDescriptor(
            name=name,
            display_name=config.display_name or "LINE",
            authorize_endpoint=config.auth_url or LINE_AUTH_URL,
            token_endpoint=config.token_url or LINE_TOKEN_URL,
            profile_endpoint=config.profile_url or LINE_PROFILE_URL,
            scopes=tuple(config.scopes or DEFAULT_SCOPES),
            scope_delimiter=" ",
            client_id=config.client_id,
            client_secret=config.client_secret,
            color="#00C300",
            icon="SiLine",
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
            ("state", state),
            ("scope", self.descriptor.scope_string),
        ]
        return f"{self.descriptor.authorize_endpoint}?{urlencode(params)}"

    async def exchange_code(self, *, code: str, callback_base_url: str) -> GrantResult:
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.descriptor.callback_url(callback_base_url),
            "client_id": self.descriptor.client_id,
            "client_secret": self.descriptor.client_secret,
        }

        try:
            async with create_http_client(self.timeout) as client:
                resp = await client.post(
                    self.descriptor.token_endpoint,
                    data=payload,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as exc:
            raise TokenExchangeError(f"LINE token request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            body = response_text(resp)
            logger.warning("LINE token exchange failed: %s", resp.status_code)
            raise TokenExchangeError(
                f"Token exchange failed: {resp.status_code}",
                status_code=resp.status_code,
                body=body,
            )

        try:
            token = _LineTokenResponse.model_validate(resp.json())
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
            raise TokenExchangeError(
                "No access_token in response", status_code=resp.status_code
            )

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
            raise ProfileFetchError(f"LINE profile request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("LINE profile fetch failed: %s", resp.status_code)
            raise ProfileFetchError(
                f"Profile fetch failed: {resp.status_code}",
                status_code=resp.status_code,
                body=response_text(resp),
            )

        try:
            data: dict[str, Any] = resp.json()
            profile = _LineProfileResponse.model_validate(data)
        except (ValueError, ValidationError) as exc:
            raise ProfileFetchError(
                "Invalid profile payload", status_code=resp.status_code
            ) from exc

        if not profile.userId:
            raise ProfileFetchError("LINE profile missing userId", status_code=resp.status_code)

        return NormalizedProfile(
            provider_user_id=profile.userId,
            name=profile.displayName or profile.userId,
            picture_url=profile.pictureUrl,
            status_message=profile.statusMessage,
            metadata={k: v for k, v in data.items() if k not in _MAPPED_FIELDS},
        )


__all__ = ["LineProviderAdapter"]
