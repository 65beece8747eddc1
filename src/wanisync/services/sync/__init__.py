"""Incremental synchronization of WaniKani collections."""

from .collections import (
    ASSIGNMENTS,
    COLLECTIONS,
    REVIEW_STATISTICS,
    SUBJECTS,
    CollectionSpec,
    get_collection,
)
from .models import MergedCollection, Watermark
from .policy import ConditionalSyncPolicy, SyncMode, SyncPlan
from .synchronizer import (
    CollectionSynchronizer,
    SyncOutcome,
    SyncReport,
    SyncRequest,
)

__all__ = [
    "ASSIGNMENTS",
    "COLLECTIONS",
    "REVIEW_STATISTICS",
    "SUBJECTS",
    "CollectionSpec",
    "CollectionSynchronizer",
    "ConditionalSyncPolicy",
    "MergedCollection",
    "SyncMode",
    "SyncOutcome",
    "SyncPlan",
    "SyncReport",
    "SyncRequest",
    "Watermark",
    "get_collection",
]
