"""Dependency Injection container for WaniSync.

This module wires the sync engine together using dependency-injector.

The container manages:
- Settings (Singleton, with the API token resolved)
- The shared rate limiter and WaniKani client
- The durable cache store
- The collection synchronizer and the leech finder
"""

from __future__ import annotations

from dependency_injector import containers, providers

from wanisync.config.loader import load_settings, resolve_api_token
from wanisync.config.models.settings import Settings
from wanisync.services import (
    CacheStore,
    CollectionSynchronizer,
    ConditionalSyncPolicy,
    LeechFinder,
    PaginatedFetcher,
    SlidingWindowRateLimiter,
    WaniKaniClient,
)


def _load_resolved_settings() -> Settings:
    return resolve_api_token(load_settings())


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for WaniSync services.

    One limiter instance is shared by every request the process makes, so
    it is a Singleton like the client that owns it.

    Example:
        >>> container = Container()
        >>> container.config.override(providers.Object(settings))
        >>> synchronizer = container.synchronizer()
        >>> synchronizer.sync("review_statistics")
    """

    # Configuration
    config = providers.Singleton(_load_resolved_settings)

    # Rate limiting
    rate_limiter = providers.Singleton(
        SlidingWindowRateLimiter,
        max_requests=providers.Callable(
            lambda config: config.api.wanikani.rate_limit_requests,
            config=config,
        ),
        window_seconds=providers.Callable(
            lambda config: config.api.wanikani.rate_limit_window,
            config=config,
        ),
    )

    # API access
    wanikani_client = providers.Singleton(
        WaniKaniClient,
        token=providers.Callable(lambda config: config.api.wanikani.token, config=config),
        rate_limiter=rate_limiter,
        base_url=providers.Callable(lambda config: config.api.wanikani.base_url, config=config),
        revision=providers.Callable(lambda config: config.api.wanikani.revision, config=config),
        timeout=providers.Callable(lambda config: config.api.wanikani.timeout, config=config),
    )

    fetcher = providers.Factory(
        PaginatedFetcher,
        client=wanikani_client,
    )

    # Cache
    cache_store = providers.Singleton(
        CacheStore,
        cache_dir=providers.Callable(lambda config: config.cache.directory, config=config),
    )

    # Synchronization
    sync_policy = providers.Factory(ConditionalSyncPolicy)

    synchronizer = providers.Singleton(
        CollectionSynchronizer,
        store=cache_store,
        fetcher=fetcher,
        policy=sync_policy,
    )

    leech_finder = providers.Factory(
        LeechFinder,
        synchronizer=synchronizer,
        settings=providers.Callable(lambda config: config.leeches, config=config),
    )
