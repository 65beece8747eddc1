"""WaniSync Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from wanisync.config.models.api_settings import APISettings
from wanisync.config.models.app_settings import CredentialSettings, LoggingSettings
from wanisync.config.models.cache_settings import CacheSettings
from wanisync.config.models.leech_settings import LeechSettings
from wanisync.shared.errors import ErrorCode, create_config_error

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Fields not given explicitly are read from environment variables, e.g.
    ``WANISYNC_API__WANIKANI__TOKEN`` or ``WANISYNC_CACHE__DIRECTORY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WANISYNC_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)
    leeches: LeechSettings = Field(default_factory=LeechSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file; absent fields fall back to the environment.

        Raises:
            ConfigurationError: If the file is missing, not valid TOML, or
                holds invalid values
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise create_config_error(
                f"Configuration file not found: {file_path}",
                code=ErrorCode.CONFIG_MISSING,
                file_path=str(file_path),
                operation="load_settings",
            )

        try:
            raw_config = toml.load(file_path)
            settings = cls(**raw_config)
        except (toml.TomlDecodeError, ValidationError) as e:
            raise create_config_error(
                f"Invalid configuration file {file_path}: {e}",
                file_path=str(file_path),
                operation="load_settings",
                original_error=e,
            ) from e

        logger.debug("Loaded configuration from %s", file_path)
        return settings
