"""Conditional sync policy.

Pure decision logic: given a collection's watermark, the ids the caller
needs and the ids already cached, choose between skipping the request,
a full refresh and a conditional delta refresh. Performs no I/O.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum

from wanisync.services.sync.collections import CollectionSpec
from wanisync.services.sync.models import Watermark
from wanisync.services.wanikani.fetcher import PageRequest
from wanisync.shared.constants import QueryParams


class SyncMode(str, Enum):
    """Shape of the request a sync will issue."""

    SKIP = "skip"
    FULL = "full"
    DELTA = "delta"


@dataclass(frozen=True)
class SyncPlan:
    """Outcome of the policy for one sync.

    Attributes:
        mode: Chosen request shape
        request: First page to fetch; None when mode is SKIP
        reason: Short explanation for logs
        scoped: The request is restricted to an id allow-list
        advances_watermark: A successful fetch may move the watermark
    """

    mode: SyncMode
    request: PageRequest | None
    reason: str
    scoped: bool = False
    advances_watermark: bool = True


class ConditionalSyncPolicy:
    """Decides how to refresh a collection.

    - needed ids given but empty: skip, nothing to fetch
    - no watermark: full refresh
    - watermark, but a needed id is not cached: full refresh, since an
      earlier partial failure may have left a gap a delta never repairs
    - otherwise: delta refresh of everything updated after the watermark,
      sent conditionally so an unchanged server answers 304

    Watermark scope decides the id allow-list of a scoped request. While
    only scoped syncs have run, the allow-list is needed plus cached ids
    and the watermark stays scoped, so a later whole-collection sync
    refreshes in full. Once a whole-collection sync has run, a scoped
    request covers the needed ids only and leaves the watermark alone,
    since it says nothing about the records outside its scope.
    """

    def plan(
        self,
        spec: CollectionSpec,
        watermark: Watermark,
        needed_ids: Collection[int] | None,
        cached_ids: Collection[int],
    ) -> SyncPlan:
        if needed_ids is not None and not needed_ids:
            return SyncPlan(SyncMode.SKIP, None, "no ids requested")

        if needed_ids is None or spec.id_filter_param is None:
            return self._plan_whole(spec, watermark, needed_ids, cached_ids)
        if watermark.date is not None and not watermark.scoped:
            return self._plan_within_whole(spec, watermark.date, needed_ids, cached_ids)
        return self._plan_scoped(spec, watermark.date, needed_ids, cached_ids)

    def _plan_whole(
        self,
        spec: CollectionSpec,
        watermark: Watermark,
        needed_ids: Collection[int] | None,
        cached_ids: Collection[int],
    ) -> SyncPlan:
        if watermark.date is None:
            return SyncPlan(SyncMode.FULL, PageRequest(spec.path, {}), "no watermark")
        if watermark.scoped:
            return SyncPlan(
                SyncMode.FULL,
                PageRequest(spec.path, {}),
                "watermark covers scoped syncs only",
            )
        missing = _count_missing(needed_ids, cached_ids)
        if missing:
            return SyncPlan(
                SyncMode.FULL,
                PageRequest(spec.path, {}),
                f"{missing} needed ids missing from cache",
            )
        return _delta(spec, {}, watermark.date)

    def _plan_within_whole(
        self,
        spec: CollectionSpec,
        watermark: str,
        needed_ids: Collection[int],
        cached_ids: Collection[int],
    ) -> SyncPlan:
        params = _scope_params(spec.id_filter_param, needed_ids)
        missing = _count_missing(needed_ids, cached_ids)
        if missing:
            return SyncPlan(
                SyncMode.FULL,
                PageRequest(spec.path, params),
                f"{missing} needed ids missing from cache",
                scoped=True,
                advances_watermark=False,
            )
        return _delta(spec, params, watermark, scoped=True, advances_watermark=False)

    def _plan_scoped(
        self,
        spec: CollectionSpec,
        watermark: str | None,
        needed_ids: Collection[int],
        cached_ids: Collection[int],
    ) -> SyncPlan:
        # Cached ids stay in scope so records tracked earlier keep being refreshed
        params = _scope_params(spec.id_filter_param, set(needed_ids) | set(cached_ids))
        if watermark is None:
            return SyncPlan(
                SyncMode.FULL, PageRequest(spec.path, params), "no watermark", scoped=True
            )
        missing = _count_missing(needed_ids, cached_ids)
        if missing:
            return SyncPlan(
                SyncMode.FULL,
                PageRequest(spec.path, params),
                f"{missing} needed ids missing from cache",
                scoped=True,
            )
        return _delta(spec, params, watermark, scoped=True)


def _delta(
    spec: CollectionSpec,
    params: dict[str, str],
    watermark: str,
    *,
    scoped: bool = False,
    advances_watermark: bool = True,
) -> SyncPlan:
    return SyncPlan(
        SyncMode.DELTA,
        PageRequest(
            spec.path,
            {**params, QueryParams.UPDATED_AFTER: watermark},
            if_modified_since=watermark,
        ),
        f"changes after {watermark}",
        scoped=scoped,
        advances_watermark=advances_watermark,
    )


def _count_missing(needed_ids: Collection[int] | None, cached_ids: Collection[int]) -> int:
    if needed_ids is None:
        return 0
    cached = set(cached_ids)
    return sum(1 for needed in needed_ids if needed not in cached)


def _scope_params(param: str, ids: Collection[int]) -> dict[str, str]:
    """Restrict the request to ``ids``."""
    return {param: ",".join(str(record_id) for record_id in sorted(ids))}
