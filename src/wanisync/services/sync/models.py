"""Cached synchronization state.

Typed models for what the synchronizer persists: the per-collection
watermark and the merged collection of records. Both convert to and from
the JSON trees stored in the CacheStore.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, Field, RootModel

from wanisync.services.wanikani.models import Resource


def parse_timestamp(value: str) -> datetime | None:
    """Parse an API timestamp such as ``2017-09-05T23:41:28.980679Z``.

    Returns None when the value is not ISO 8601. Naive values are read as UTC.
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_older(candidate: str | None, reference: str | None) -> bool:
    """True if ``candidate`` is strictly older than ``reference``.

    Missing timestamps are never considered older.
    """
    if candidate is None or reference is None:
        return False
    candidate_dt = parse_timestamp(candidate)
    reference_dt = parse_timestamp(reference)
    if candidate_dt is None or reference_dt is None:
        return candidate < reference
    return candidate_dt < reference_dt


class Watermark(BaseModel):
    """Server state up to ``date`` has been merged into the cache.

    A ``scoped`` watermark was written by id-scoped syncs and only covers
    the ids they requested. Whole-collection syncs never take a delta from it.
    """

    date: str | None = None
    scoped: bool = False

    def advance(self, candidate: str | None, *, scoped: bool = False) -> Watermark:
        """Return the later of this watermark and ``candidate``.

        The stored date never moves backwards; the scope becomes ``scoped``.
        """
        if candidate is None:
            return self
        if self.date is None or is_older(self.date, candidate):
            return Watermark(date=candidate, scoped=scoped)
        return Watermark(date=self.date, scoped=scoped)

    def to_cache(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_cache(cls, value: Any) -> Watermark:
        return cls.model_validate(value or {})


class MergedCollection(RootModel[dict[int, Resource]]):
    """Mapping of record key to the most recently observed record."""

    root: dict[int, Resource] = Field(default_factory=dict)

    def merge(
        self,
        resources: Iterable[Resource],
        key_for: Callable[[Resource], int],
    ) -> tuple[MergedCollection, int]:
        """Merge ``resources`` into a copy of this collection.

        A stored record is replaced unless it is strictly newer than the
        incoming one, so for every key the latest ``data_updated_at`` wins.

        Returns:
            The merged copy and the number of records inserted or replaced
        """
        merged = dict(self.root)
        changed = 0
        for resource in resources:
            key = key_for(resource)
            existing = merged.get(key)
            if existing is not None and is_older(resource.data_updated_at, existing.data_updated_at):
                continue
            if existing != resource:
                changed += 1
            merged[key] = resource
        return MergedCollection(merged), changed

    def subset(self, keys: Iterable[int]) -> MergedCollection:
        """Return the records whose keys are in ``keys``."""
        wanted = set(keys)
        return MergedCollection({key: value for key, value in self.root.items() if key in wanted})

    def ids(self) -> set[int]:
        return set(self.root)

    def get(self, key: int) -> Resource | None:
        return self.root.get(key)

    def values(self) -> list[Resource]:
        return list(self.root.values())

    def __getitem__(self, key: int) -> Resource:
        return self.root[key]

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def __iter__(self) -> Iterator[int]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def to_cache(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_cache(cls, value: Any) -> MergedCollection:
        return cls.model_validate(value or {})
