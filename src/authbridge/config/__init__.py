"""Configuration loading for authbridge."""

from .loader import load_config
from .models import AppConfigModel, AuthSettingsModel, SessionConfigModel

__all__ = ["AppConfigModel", "AuthSettingsModel", "SessionConfigModel", "load_config"]
