"""Application-level configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level name")
    file: Path | None = Field(default=None, description="Optional JSON log file")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Normalize and validate the level name."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Invalid log level: {value}"
            raise ValueError(msg)
        return level


class CredentialSettings(BaseModel):
    """Where the bearer token is read from when not set directly."""

    token_file: Path = Field(
        default=Path("token.json"),
        description='JSON file shaped as {"token": "..."}',
    )
