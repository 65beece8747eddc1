"""WaniKani API access: client, pagination and response models."""

from .client import WaniKaniClient
from .fetcher import (
    UNCHANGED,
    FetchOutcome,
    FetchResult,
    PageRequest,
    PaginatedFetcher,
    Unchanged,
)
from .models import (
    Assignment,
    Collection,
    Meaning,
    Pages,
    Reading,
    Resource,
    ReviewStatistic,
    Subject,
)

__all__ = [
    "UNCHANGED",
    "Assignment",
    "Collection",
    "FetchOutcome",
    "FetchResult",
    "Meaning",
    "PageRequest",
    "Pages",
    "PaginatedFetcher",
    "Reading",
    "Resource",
    "ReviewStatistic",
    "Subject",
    "Unchanged",
    "WaniKaniClient",
]
