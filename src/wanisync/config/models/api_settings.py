"""API configuration models.

This module contains configuration models for the WaniKani API:
authentication, request timeout and rate limiting.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from wanisync.shared.constants import WaniKaniAPI


class WaniKaniSettings(BaseModel):
    """WaniKani API configuration.

    Security: token is masked in __repr__ to prevent accidental exposure
    in logs.
    """

    token: str = Field(
        default="",
        repr=False,
        description="WaniKani API v2 bearer token",
    )
    base_url: str = Field(
        default=WaniKaniAPI.BASE_URL,
        description="Base URL of the API; must end with a slash",
    )
    revision: str = Field(
        default=WaniKaniAPI.REVISION,
        description="Value of the Wanikani-Revision header",
    )
    timeout: float = Field(
        default=WaniKaniAPI.DEFAULT_TIMEOUT,
        gt=0,
        description="Request timeout in seconds",
    )

    # Rate limiting settings
    rate_limit_requests: int = Field(
        default=WaniKaniAPI.RATE_LIMIT_REQUESTS,
        gt=0,
        description="Maximum requests admitted per rolling window",
    )
    rate_limit_window: float = Field(
        default=WaniKaniAPI.RATE_LIMIT_WINDOW,
        gt=0,
        description="Length of the rolling window in seconds",
    )

    def __repr__(self) -> str:
        masked_token = "****" if self.token else "[empty]"
        return (
            f"WaniKaniSettings("
            f"token={masked_token}, "
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}, "
            f"rate_limit={self.rate_limit_requests}/{self.rate_limit_window}s)"
        )


class APISettings(BaseModel):
    """API configuration container."""

    wanikani: WaniKaniSettings = Field(
        default_factory=WaniKaniSettings,
        description="WaniKani API configuration",
    )
