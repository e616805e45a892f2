import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from authbridge.config.models import AppConfigModel
from authbridge.config.references import interpolate_all

# No logging in this module as it's used before logging is configured

__all__ = ["ENV_PROVIDER_CREDENTIALS", "find_config_path", "load_config"]

CONFIG_ENV_VAR = "AUTHBRIDGE_CONFIG"
SESSION_SECRET_ENV_VAR = "AUTHBRIDGE_SESSION_SECRET"
DEFAULT_CONFIG_FILENAME = "authbridge.yml"

# Provider credentials read from the environment when the config file has no
# `providers` section.
ENV_PROVIDER_CREDENTIALS: dict[str, tuple[str, str]] = {
    "line": ("LINE_CHANNEL_ID", "LINE_CHANNEL_SECRET"),
    "google": ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET"),
    "facebook": ("FACEBOOK_APP_ID", "FACEBOOK_APP_SECRET"),
}


def find_config_path(path: str | Path | None = None) -> tuple[Path, bool]:
    """Return the config path to use and whether it was explicitly requested."""
    if path is not None:
        return Path(path), True
    if CONFIG_ENV_VAR in os.environ:
        return Path(os.environ[CONFIG_ENV_VAR]), True
    return Path.cwd() / DEFAULT_CONFIG_FILENAME, False


def _providers_from_env() -> dict[str, Any]:
    providers: dict[str, Any] = {}
    for name, (id_var, secret_var) in ENV_PROVIDER_CREDENTIALS.items():
        client_id = os.environ.get(id_var, "")
        client_secret = os.environ.get(secret_var, "")
        if client_id and client_secret:
            providers[name] = {"client_id": client_id, "client_secret": client_secret}
    return providers


def load_config(path: str | Path | None = None) -> AppConfigModel:
    """Load configuration from --config, $AUTHBRIDGE_CONFIG, or ./authbridge.yml.

    A missing default file is not an error: defaults plus environment
    variables apply. An explicitly requested file must exist.

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist.
        ValueError: If the file is not a mapping or fails validation.
    """
    config_path, explicit = find_config_path(path)

    config_data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError("authbridge config must be a mapping")
        config_data = interpolate_all(loaded, config_path.parent)
    elif explicit:
        raise FileNotFoundError(f"authbridge config not found at {config_path}")

    providers = config_data.get("providers")
    if providers is None:
        config_data["providers"] = _providers_from_env()
    elif isinstance(providers, dict):
        # A bare `line:` entry means "defaults only", which still lacks credentials.
        config_data["providers"] = {name: entry or {} for name, entry in providers.items()}

    session = config_data.get("session") or {}
    if isinstance(session, dict):
        if not session.get("secret_key") and os.environ.get(SESSION_SECRET_ENV_VAR):
            session["secret_key"] = os.environ[SESSION_SECRET_ENV_VAR]
        config_data["session"] = session

    try:
        return AppConfigModel.model_validate(config_data)
    except ValidationError as exc:
        raise ValueError(f"Invalid authbridge config: {exc}") from exc
