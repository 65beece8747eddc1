"""Leech selection configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from wanisync.shared.constants import LeechDefaults


class LeechSettings(BaseModel):
    """Thresholds that decide which subjects count as leeches."""

    min_incorrect_count: int = Field(
        default=LeechDefaults.MIN_INCORRECT_COUNT,
        ge=1,
        description="Minimum incorrect answers for a subject to be a leech",
    )
    max_srs_stage: int = Field(
        default=LeechDefaults.MAX_SRS_STAGE,
        ge=0,
        le=9,
        description="Subjects above this SRS stage are no longer reported",
    )
