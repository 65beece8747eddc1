"""WaniSync Configuration Module

This module provides unified access to configuration models, the settings
loader and credential resolution.
"""

from __future__ import annotations

from .credentials import load_api_token
from .loader import load_settings, resolve_api_token
from .models import (
    APISettings,
    CacheSettings,
    CredentialSettings,
    LeechSettings,
    LoggingSettings,
    Settings,
    WaniKaniSettings,
)

__all__ = [
    "APISettings",
    "CacheSettings",
    "CredentialSettings",
    "LeechSettings",
    "LoggingSettings",
    "Settings",
    "WaniKaniSettings",
    "load_api_token",
    "load_settings",
    "resolve_api_token",
]
