"""Tests for the dependency injection container wiring."""

import pytest
from dependency_injector import providers

from wanisync.config.models.settings import Settings
from wanisync.containers import Container
from wanisync.services import CollectionSynchronizer, LeechFinder


@pytest.fixture
def container(cache_dir):
    settings = Settings(
        api={"wanikani": {"token": "test-token", "rate_limit_requests": 30, "rate_limit_window": 30}},
        cache={"directory": cache_dir},
        leeches={"min_incorrect_count": 4},
    )
    container = Container()
    container.config.override(providers.Object(settings))
    return container


class TestContainer:
    def test_synchronizer_wiring(self, container, cache_dir):
        synchronizer = container.synchronizer()

        assert isinstance(synchronizer, CollectionSynchronizer)
        assert synchronizer.store.cache_dir == cache_dir
        assert cache_dir.is_dir()

    def test_limiter_uses_settings(self, container):
        limiter = container.rate_limiter()

        assert limiter.max_requests == 30
        assert limiter.window_seconds == 30.0

    def test_single_limiter_shared(self, container):
        assert container.wanikani_client().rate_limiter is container.rate_limiter()
        assert container.synchronizer() is container.synchronizer()

    def test_leech_finder_settings(self, container):
        finder = container.leech_finder()

        assert isinstance(finder, LeechFinder)
        assert finder.settings.min_incorrect_count == 4
        assert finder.synchronizer is container.synchronizer()
