"""Collection synchronizer.

Orchestrates policy, fetcher and cache store for one collection at a
time: read the cached state, ask the policy for a request shape, fetch,
merge by key and persist. A failed fetch leaves the persisted state
untouched.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from wanisync.services.cache.store import CacheStore
from wanisync.services.sync.collections import CollectionSpec, get_collection
from wanisync.services.sync.models import MergedCollection, Watermark
from wanisync.services.sync.policy import ConditionalSyncPolicy, SyncMode
from wanisync.services.wanikani.fetcher import UNCHANGED, PaginatedFetcher
from wanisync.services.wanikani.models import Resource
from wanisync.shared.errors import (
    OperationCancelledError,
    WaniSyncError,
)
from wanisync.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncRequest:
    """One entry of a multi-collection sync run."""

    collection: str
    needed_ids: frozenset[int] | None = None


@dataclass
class SyncOutcome:
    """Result of one collection in a multi-collection run.

    On failure ``records`` holds the last-known-good cached view.
    """

    collection: str
    records: MergedCollection
    error: WaniSyncError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    outcomes: list[SyncOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[SyncOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> list[SyncOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    def __getitem__(self, collection: str) -> SyncOutcome:
        for outcome in self.outcomes:
            if outcome.collection == collection:
                return outcome
        raise KeyError(collection)


class CollectionSynchronizer:
    """Keeps cached collections fresh with incremental refreshes.

    Args:
        store: Durable cache holding collections and watermarks
        fetcher: Paginated fetcher bound to the rate-limited client
        policy: Sync policy (default: ConditionalSyncPolicy)
    """

    def __init__(
        self,
        store: CacheStore,
        fetcher: PaginatedFetcher,
        policy: ConditionalSyncPolicy | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.policy = policy or ConditionalSyncPolicy()

    def cached(self, collection: str | CollectionSpec) -> MergedCollection:
        """Return the cached collection without any network request."""
        spec = get_collection(collection)
        return MergedCollection.from_cache(self.store.get(spec.name))

    def sync(
        self,
        collection: str | CollectionSpec,
        needed_ids: Iterable[int] | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> MergedCollection:
        """Bring a collection up to date and return it.

        Args:
            collection: Collection name or CollectionSpec
            needed_ids: Keys the caller needs; the result is restricted to
                them and a missing one forces a full refresh
            cancel_event: Aborts the refresh between requests when set

        Returns:
            The merged collection, or its subset keyed by ``needed_ids``

        Raises:
            WaniKaniAPIError: If the fetch fails; nothing is persisted
            OperationCancelledError: If ``cancel_event`` fires
            DomainError: For an unknown collection or a record without key
        """
        spec = get_collection(collection)
        needed = None if needed_ids is None else frozenset(needed_ids)
        start = time.perf_counter()

        merged = MergedCollection.from_cache(self.store.get_or_initialize(spec.name, dict))
        watermark = Watermark.from_cache(
            self.store.get_or_initialize(spec.watermark_key, lambda: Watermark().to_cache())
        )

        plan = self.policy.plan(spec, watermark, needed, merged.ids())
        log_operation_start(
            logger,
            "sync_collection",
            {"collection": spec.name, "mode": plan.mode.value, "reason": plan.reason},
        )

        if plan.mode is SyncMode.SKIP or plan.request is None:
            return MergedCollection()

        outcome = self.fetcher.fetch_all(plan.request, cancel_event)

        if outcome is UNCHANGED:
            result = merged
            changed = 0
        else:
            result, changed = merged.merge(outcome.resources, spec.key_for)
            # Collection first: a failed watermark write only costs a re-fetch
            self.store.put(spec.name, result.to_cache())
            if plan.advances_watermark:
                new_watermark = watermark.advance(outcome.data_updated_at, scoped=plan.scoped)
                self.store.put(spec.watermark_key, new_watermark.to_cache())

        log_operation_success(
            logger,
            "sync_collection",
            (time.perf_counter() - start) * 1000,
            result_info={
                "mode": plan.mode.value,
                "unchanged": outcome is UNCHANGED,
                "changed": changed,
                "size": len(result),
            },
            context={"collection": spec.name},
        )
        logger.info(
            "Synced %s (%s): %d changed, %d cached",
            spec.name,
            "unchanged" if outcome is UNCHANGED else plan.mode.value,
            changed,
            len(result),
        )

        return result if needed is None else result.subset(needed)

    def get_resource(
        self,
        collection: str | CollectionSpec,
        resource_id: int,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Resource:
        """Return a single resource, fetching it only on a cache miss.

        Raises:
            DomainError: If the collection has no single-resource cache
            WaniKaniAPIError: If the fetch fails; nothing is persisted
        """
        spec = get_collection(collection)
        key = spec.resource_key(resource_id)
        value = self.store.get_or_initialize(
            key,
            lambda: self.fetcher.fetch_resource(
                f"{spec.path}/{resource_id}",
                cancel_event,
            ).model_dump(mode="json"),
        )
        return Resource.model_validate(value)

    def sync_many(
        self,
        requests: Iterable[SyncRequest],
        *,
        cancel_event: threading.Event | None = None,
    ) -> SyncReport:
        """Sync several collections, continuing past individual failures.

        A failed collection is logged and reported with its last-known-good
        cached records. Cancellation stops the whole run.

        Raises:
            OperationCancelledError: If ``cancel_event`` fires
        """
        report = SyncReport()
        for request in requests:
            try:
                records = self.sync(
                    request.collection,
                    request.needed_ids,
                    cancel_event=cancel_event,
                )
            except OperationCancelledError:
                raise
            except WaniSyncError as e:
                log_operation_error(
                    logger,
                    e,
                    operation="sync_collection",
                    additional_context={"collection": request.collection},
                )
                logger.warning("Sync of %s failed, using cached data", request.collection)
                report.outcomes.append(
                    SyncOutcome(request.collection, self._fallback(request), e)
                )
            else:
                report.outcomes.append(SyncOutcome(request.collection, records))
        return report

    def _fallback(self, request: SyncRequest) -> MergedCollection:
        try:
            records = self.cached(request.collection)
        except WaniSyncError:
            return MergedCollection()
        if request.needed_ids is None:
            return records
        return records.subset(request.needed_ids)
