"""Cache configuration model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from wanisync.shared.constants import CacheLayout


class CacheSettings(BaseModel):
    """Location of the durable cache directory."""

    directory: Path = Field(
        default=Path(CacheLayout.DEFAULT_DIR),
        description="Directory holding one <key>.json file per cache entry",
    )
