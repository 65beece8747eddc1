"""Settings loader.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Resolving the API token from the credential file
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

from wanisync.config.credentials import load_api_token
from wanisync.config.models.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = (
    Path("config/config.toml"),
    Path("wanisync.toml"),
)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML configuration file. If None, the
            default locations are tried before falling back to environment
            variables only.

    Returns:
        Settings instance loaded from the selected source
    """
    load_dotenv(Path(".env"), override=False)

    if config_path:
        return Settings.from_toml_file(config_path)

    for default_path in DEFAULT_CONFIG_PATHS:
        if default_path.exists():
            return Settings.from_toml_file(default_path)

    return Settings()


def resolve_api_token(settings: Settings) -> Settings:
    """Return settings whose API token is populated.

    A token set through configuration or environment wins; otherwise it is
    read from the credential file.

    Raises:
        ConfigurationError: If no token is configured and the credential
            file is missing or malformed
    """
    if settings.api.wanikani.token:
        return settings

    token = load_api_token(settings.credentials.token_file)
    resolved = settings.model_copy(deep=True)
    resolved.api.wanikani.token = token
    return resolved


__all__ = [
    "load_settings",
    "resolve_api_token",
]
