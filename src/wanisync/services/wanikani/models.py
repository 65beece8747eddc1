"""WaniKani API response models.

This module defines Pydantic models for the two response shapes the API
returns (a single Resource, or a paginated Collection of Resources) and
typed views of the resource payloads WaniSync reads.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Resource(BaseModel):
    """A single API resource.

    Unknown top-level fields are preserved so that cached records keep
    the exact shape the server returned.
    """

    model_config = ConfigDict(extra="allow")

    id: int | None = None
    object: str
    url: str
    data_updated_at: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class Pages(BaseModel):
    """Pagination block of a collection response."""

    model_config = ConfigDict(extra="allow")

    next_url: str | None = None
    previous_url: str | None = None
    per_page: int | None = None


class Collection(BaseModel):
    """One page of a collection response."""

    model_config = ConfigDict(extra="allow")

    object: str
    url: str
    pages: Pages = Field(default_factory=Pages)
    total_count: int = 0
    data_updated_at: str | None = None
    data: list[Resource] = Field(default_factory=list)


class ReviewStatistic(BaseModel):
    """Payload of a ``review_statistic`` resource."""

    model_config = ConfigDict(extra="ignore")

    subject_id: int
    subject_type: str
    meaning_correct: int = 0
    meaning_incorrect: int = 0
    reading_correct: int = 0
    reading_incorrect: int = 0
    percentage_correct: int = 0
    hidden: bool = False


class Assignment(BaseModel):
    """Payload of an ``assignment`` resource."""

    model_config = ConfigDict(extra="ignore")

    subject_id: int
    subject_type: str | None = None
    srs_stage: int


class Meaning(BaseModel):
    model_config = ConfigDict(extra="ignore")

    meaning: str
    primary: bool = False
    accepted_answer: bool = True


class Reading(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reading: str
    primary: bool = False
    accepted_answer: bool = True
    type: str | None = None


class Subject(BaseModel):
    """Payload of a ``kanji``, ``vocabulary`` or ``radical`` resource.

    Radicals carry no readings, so ``readings`` defaults to empty.
    """

    model_config = ConfigDict(extra="ignore")

    characters: str | None = None
    level: int
    slug: str
    document_url: str
    meanings: list[Meaning] = Field(default_factory=list)
    readings: list[Reading] = Field(default_factory=list)
    hidden_at: str | None = None
