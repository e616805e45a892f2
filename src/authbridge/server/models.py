"""
Pydantic models for the HTTP API.

Bodies are serialized with camelCase keys, which is what the browser
frontend consumes.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from authbridge.auth.contracts import ProviderSummary
from authbridge.auth.storage import AuthSession


class ApiModel(BaseModel):
    """Base for response bodies."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _utc(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


class ProviderInfo(ApiModel):
    """A provider the frontend can render a login button for."""

    name: str = Field(..., description="Stable provider key, used in /auth/{provider}")
    display_name: str = Field(..., description="Human label")
    color: str = Field(..., description="Brand color for the login button")
    icon: str = Field(..., description="Icon identifier for the login button")

    @classmethod
    def from_summary(cls, summary: ProviderSummary) -> "ProviderInfo":
        return cls(
            name=summary.name,
            display_name=summary.display_name,
            color=summary.color,
            icon=summary.icon,
        )


class ProvidersResponse(ApiModel):
    providers: list[ProviderInfo]


class AuthUrlResponse(ApiModel):
    auth_url: str = Field(..., description="Provider authorize URL to open in the browser")


class IdentityResponse(ApiModel):
    """The normalized identity of the current ambient session."""

    provider: str
    user_id: str
    display_name: str
    email: str | None = None
    picture_url: str | None = None
    login_time: datetime
    expires_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_session(cls, session: AuthSession) -> "IdentityResponse":
        return cls(
            provider=session.provider,
            user_id=session.user_id,
            display_name=session.display_name,
            email=session.email,
            picture_url=session.picture_url,
            login_time=_utc(session.created_at),
            expires_at=_utc(session.expires_at),
            metadata=session.metadata,
        )


class LogoutResponse(ApiModel):
    success: bool = True


class ErrorResponse(ApiModel):
    """Error body for non-redirect endpoints."""

    error: str = Field(..., description="Human-readable message")
    reason: str = Field(..., description="Machine-readable reason code")
