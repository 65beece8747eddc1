"""Configuration models for WaniSync."""

from .api_settings import APISettings, WaniKaniSettings
from .app_settings import CredentialSettings, LoggingSettings
from .cache_settings import CacheSettings
from .leech_settings import LeechSettings
from .settings import Settings

__all__ = [
    "APISettings",
    "CacheSettings",
    "CredentialSettings",
    "LeechSettings",
    "LoggingSettings",
    "Settings",
    "WaniKaniSettings",
]
