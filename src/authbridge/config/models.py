"""Pydantic models for the authbridge configuration file."""

from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from authbridge.auth.http import DEFAULT_TIMEOUT_SECONDS
from authbridge.auth.models import HttpTransportConfigModel, ProviderConfigModel
from authbridge.auth.service import DEFAULT_SESSION_TTL_SECONDS
from authbridge.auth.storage import DEFAULT_STATE_TTL_SECONDS
from authbridge.models import BridgeBaseModel


class SessionConfigModel(BridgeBaseModel):
    """Ambient (cookie) session settings."""

    model_config = ConfigDict(extra="forbid", frozen=False)

    secret_key: str | None = Field(default=None, repr=False)
    cookie_name: str = "authbridge_session"
    max_age_seconds: int = 14 * 24 * 60 * 60
    https_only: bool = False
    same_site: Literal["lax", "strict", "none"] = "lax"


class AuthSettingsModel(BridgeBaseModel):
    """Login flow settings."""

    model_config = ConfigDict(extra="forbid", frozen=False)

    route_prefix: str = "/auth"
    frontend_url: str | None = None
    default_session_ttl_seconds: int = Field(default=DEFAULT_SESSION_TTL_SECONDS, gt=0)
    state_ttl_seconds: int = Field(default=DEFAULT_STATE_TTL_SECONDS, gt=0)
    http_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("route_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value


class AppConfigModel(BridgeBaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(extra="forbid", frozen=False)

    transport: HttpTransportConfigModel = Field(default_factory=HttpTransportConfigModel)
    session: SessionConfigModel = Field(default_factory=SessionConfigModel)
    auth: AuthSettingsModel = Field(default_factory=AuthSettingsModel)
    providers: dict[str, ProviderConfigModel] = Field(default_factory=dict)


__all__ = ["AppConfigModel", "AuthSettingsModel", "SessionConfigModel"]
