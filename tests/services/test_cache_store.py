"""Tests for the file-backed CacheStore."""

import pytest

from wanisync.services.cache.store import CacheStore, serialize
from wanisync.shared.errors import CacheCorruptionError, DomainError, ErrorCode, InfrastructureError


class TestCacheStore:
    def test_put_and_get(self, store):
        assert store.put("assignments", {"1": {"srs_stage": 3}}) is True

        assert store.get("assignments") == {"1": {"srs_stage": 3}}
        assert "assignments" in store
        assert len(store) == 1

    def test_get_missing_returns_none(self, store):
        assert store.get("missing") is None

    def test_get_returns_independent_copy(self, store):
        store.put("key", {"items": [1, 2]})

        value = store.get("key")
        value["items"].append(3)

        assert store.get("key") == {"items": [1, 2]}

    def test_identical_value_write_suppressed(self, store, cache_dir):
        """Putting the same value twice touches the disk once."""
        assert store.put("subjects", {"b": 1, "a": [1, 2]}) is True
        mtime = (cache_dir / "subjects.json").stat().st_mtime_ns

        # Key order does not matter for the comparison
        assert store.put("subjects", {"a": [1, 2], "b": 1}) is False

        assert store.write_count == 1
        assert (cache_dir / "subjects.json").stat().st_mtime_ns == mtime

    def test_changed_value_written(self, store):
        store.put("key", {"value": 1})
        store.put("key", {"value": 2})

        assert store.write_count == 2
        assert store.get("key") == {"value": 2}

    def test_entries_persist_across_instances(self, store, cache_dir):
        store.put("review_statistics", {"1": {"id": 1}})
        store.put("review_statistics-watermark", {"date": "2024-01-01T00:00:00Z"})

        reloaded = CacheStore(cache_dir)

        assert sorted(reloaded.keys()) == ["review_statistics", "review_statistics-watermark"]
        assert reloaded.get("review_statistics-watermark") == {"date": "2024-01-01T00:00:00Z"}

    def test_reloaded_entry_still_suppresses_identical_write(self, cache_dir):
        # Written by hand, not in canonical form
        cache_dir.mkdir(parents=True)
        (cache_dir / "key.json").write_text('{ "b": 1,\n  "a": 2 }', encoding="utf-8")

        store = CacheStore(cache_dir)

        assert store.put("key", {"a": 2, "b": 1}) is False
        assert store.write_count == 0

    def test_on_disk_format_is_sorted_json(self, store, cache_dir):
        store.put("key", {"b": 1, "a": 2})

        assert (cache_dir / "key.json").read_bytes() == serialize({"a": 2, "b": 1})

    def test_no_temp_file_left_behind(self, store, cache_dir):
        store.put("key", {"value": 1})

        assert [path.name for path in cache_dir.iterdir()] == ["key.json"]

    def test_corrupt_entry_is_fatal(self, cache_dir):
        cache_dir.mkdir(parents=True)
        (cache_dir / "assignments.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(CacheCorruptionError) as exc_info:
            CacheStore(cache_dir)

        assert exc_info.value.code == ErrorCode.CACHE_CORRUPTED

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", "with space"])
    def test_invalid_key_rejected(self, store, key):
        with pytest.raises(DomainError) as exc_info:
            store.put(key, {})

        assert exc_info.value.code == ErrorCode.INVALID_CACHE_KEY

    def test_unserializable_value(self, store):
        with pytest.raises(InfrastructureError) as exc_info:
            store.put("key", {"value": object()})

        assert exc_info.value.code == ErrorCode.CACHE_SERIALIZATION_ERROR
        assert "key" not in store

    def test_write_failure_leaves_previous_value(self, store, mocker):
        store.put("key", {"value": 1})
        mocker.patch("wanisync.services.cache.store.os.replace", side_effect=OSError("disk full"))

        with pytest.raises(InfrastructureError) as exc_info:
            store.put("key", {"value": 2})

        assert exc_info.value.code == ErrorCode.CACHE_WRITE_FAILED
        assert store.get("key") == {"value": 1}

    def test_get_or_initialize_miss_persists(self, store):
        factory_calls = []

        def factory():
            factory_calls.append(True)
            return {"date": None}

        assert store.get_or_initialize("watermark", factory) == {"date": None}
        assert store.get_or_initialize("watermark", factory) == {"date": None}

        assert len(factory_calls) == 1
        assert store.write_count == 1

    def test_get_or_initialize_factory_failure_stores_nothing(self, store):
        def factory():
            raise RuntimeError("fetch failed")

        with pytest.raises(RuntimeError):
            store.get_or_initialize("subject-1", factory)

        assert "subject-1" not in store
        assert store.write_count == 0
