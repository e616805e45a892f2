"""Pydantic models for provider configuration.

## Security-relevant configuration fields

- `scopes`: affect what permissions are requested from the upstream provider.
- `callback_path`: controls which HTTP route receives provider callbacks and
  must match the redirect URI registered with the provider.

Treat changes to these fields as security-sensitive.
"""

from typing import Literal

from pydantic import ConfigDict

from authbridge.models import BridgeBaseModel


class HttpTransportConfigModel(BridgeBaseModel):
    """HTTP transport configuration for callback and redirect URL building.

    Handles scheme detection, base URLs, and proxy settings.
    """

    # Override frozen=True since this is a config object that may need updates
    model_config = ConfigDict(extra="forbid", frozen=False)

    port: int = 8000
    host: str = "localhost"
    scheme: Literal["http", "https"] | None = None
    base_url: str | None = None
    trust_proxy: bool = False


class ProviderConfigModel(BridgeBaseModel):
    """Configuration for one identity provider.

    Only the credential pair is required; every other field falls back to the
    adapter's built-in defaults. An empty `client_id` or `client_secret`
    (e.g. an unset `${ENV}` reference) means the provider is not registered.
    """

    model_config = ConfigDict(extra="forbid", frozen=False)

    client_id: str = ""
    client_secret: str = ""
    scopes: list[str] | None = None
    display_name: str | None = None
    auth_url: str | None = None
    token_url: str | None = None
    profile_url: str | None = None
    callback_path: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret)


__all__ = ["HttpTransportConfigModel", "ProviderConfigModel"]
