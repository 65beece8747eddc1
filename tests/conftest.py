"""
Pytest configuration and shared fixtures for WaniSync tests.

HTTP is mocked at the ``requests.Session`` seam: tests queue response
mocks on ``mock_session.get.side_effect`` and inspect its call arguments.
"""

from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any, Callable
from unittest.mock import Mock

import pytest

from wanisync.services.cache.store import CacheStore
from wanisync.services.rate_limiter import SlidingWindowRateLimiter
from wanisync.services.sync.synchronizer import CollectionSynchronizer
from wanisync.services.wanikani.client import WaniKaniClient
from wanisync.services.wanikani.fetcher import PaginatedFetcher

API_BASE = "https://api.wanikani.com/v2/"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def cache_dir(temp_dir: Path) -> Path:
    return temp_dir / "cache"


@pytest.fixture
def make_response() -> Callable[..., Mock]:
    """Build a mock ``requests.Response``.

    ``body=ValueError`` makes ``json()`` raise.
    """

    def _make(status_code: int = 200, body: Any = None, headers: dict[str, str] | None = None) -> Mock:
        response = Mock()
        response.status_code = status_code
        response.headers = headers or {}
        if body is ValueError:
            response.json.side_effect = ValueError("Expecting value")
        else:
            response.json.return_value = body
        return response

    return _make


@pytest.fixture
def make_resource() -> Callable[..., dict[str, Any]]:
    """Build a resource body as returned by the API."""

    def _make(
        resource_id: int,
        updated_at: str = "2024-01-01T00:00:00.000000Z",
        object_type: str = "review_statistic",
        **data: Any,
    ) -> dict[str, Any]:
        return {
            "id": resource_id,
            "object": object_type,
            "url": f"{API_BASE}{object_type}s/{resource_id}",
            "data_updated_at": updated_at,
            "data": data,
        }

    return _make


@pytest.fixture
def make_page() -> Callable[..., dict[str, Any]]:
    """Build a collection page body."""

    def _make(
        resources: list[dict[str, Any]],
        next_url: str | None = None,
        updated_at: str | None = "2024-01-01T00:00:00.000000Z",
        url: str = f"{API_BASE}review_statistics",
    ) -> dict[str, Any]:
        return {
            "object": "collection",
            "url": url,
            "pages": {"next_url": next_url, "previous_url": None, "per_page": 500},
            "total_count": len(resources),
            "data_updated_at": updated_at,
            "data": resources,
        }

    return _make


@pytest.fixture
def mock_session() -> Mock:
    return Mock()


@pytest.fixture
def rate_limiter() -> SlidingWindowRateLimiter:
    """A limiter that never blocks within a test."""
    return SlidingWindowRateLimiter(max_requests=1000, window_seconds=60)


@pytest.fixture
def client(mock_session: Mock, rate_limiter: SlidingWindowRateLimiter) -> WaniKaniClient:
    return WaniKaniClient("test-token", rate_limiter, session=mock_session)


@pytest.fixture
def fetcher(client: WaniKaniClient) -> PaginatedFetcher:
    return PaginatedFetcher(client)


@pytest.fixture
def store(cache_dir: Path) -> CacheStore:
    return CacheStore(cache_dir)


@pytest.fixture
def synchronizer(store: CacheStore, fetcher: PaginatedFetcher) -> CollectionSynchronizer:
    return CollectionSynchronizer(store, fetcher)
