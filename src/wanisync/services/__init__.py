"""Services module for WaniSync.

This module contains the WaniKani API client, rate limiting, the durable
cache, the incremental synchronizer and the leech finder built on it.
"""

from .cache import CacheStore
from .leeches import LeechFinder, LeechQuery
from .rate_limiter import SlidingWindowRateLimiter
from .sync import CollectionSynchronizer, ConditionalSyncPolicy
from .wanikani import PaginatedFetcher, WaniKaniClient

__all__ = [
    "CacheStore",
    "CollectionSynchronizer",
    "ConditionalSyncPolicy",
    "LeechFinder",
    "LeechQuery",
    "PaginatedFetcher",
    "SlidingWindowRateLimiter",
    "WaniKaniClient",
]
