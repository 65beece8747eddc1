"""Durable JSON key-value cache for WaniSync.

Each cache entry is one ``<key>.json`` file under the cache directory.
Every file is loaded into an in-memory mirror at startup; reads never
touch the disk afterwards. Writes are suppressed when the new
serialization is byte-identical to the stored one.
"""

from __future__ import annotations

import logging
import os
import re
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Callable

import orjson

from wanisync.shared.constants import CacheKeys, CacheLayout
from wanisync.shared.errors import (
    CacheCorruptionError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
)
from wanisync.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(CacheKeys.ALLOWED_PATTERN)


def serialize(value: Any) -> bytes:
    """Serialize a JSON-compatible value deterministically (sorted keys)."""
    return orjson.dumps(value, option=orjson.OPT_SORT_KEYS)


class CacheStore:
    """File-backed key-value store with write suppression.

    Values must be JSON-compatible trees. At most one process may own a
    cache directory at a time; there is no file locking.

    Args:
        cache_dir: Directory holding the ``<key>.json`` files
        autoload: Load every entry immediately (default: True)
    """

    def __init__(self, cache_dir: Path | str, *, autoload: bool = True) -> None:
        self.cache_dir = Path(cache_dir)
        self._entries: dict[str, bytes] = {}
        self.write_count = 0
        if autoload:
            self.load()

    def _path_for(self, key: str) -> Path:
        return self.cache_dir / f"{key}{CacheLayout.FILE_SUFFIX}"

    @staticmethod
    def _validate_key(key: str) -> None:
        if not isinstance(key, str) or not _KEY_PATTERN.match(key):
            raise DomainError(
                code=ErrorCode.INVALID_CACHE_KEY,
                message=f"Invalid cache key: {key!r}",
                context=ErrorContext(operation="validate_cache_key"),
            )

    def load(self) -> int:
        """Load every entry from disk, replacing the in-memory mirror.

        Returns:
            Number of entries loaded

        Raises:
            CacheCorruptionError: If any entry cannot be read or parsed
            InfrastructureError: If the cache directory cannot be created
        """
        start = time.perf_counter()
        context = ErrorContext(
            operation="load_cache",
            file_path=str(self.cache_dir),
        )

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = InfrastructureError(
                code=ErrorCode.CACHE_READ_FAILED,
                message=f"Failed to create cache directory: {self.cache_dir}",
                context=context,
                original_error=e,
            )
            log_operation_error(logger, error)
            raise error from e

        entries: dict[str, bytes] = {}
        for path in sorted(self.cache_dir.glob(f"*{CacheLayout.FILE_SUFFIX}")):
            key = path.name[: -len(CacheLayout.FILE_SUFFIX)]
            try:
                value = orjson.loads(path.read_bytes())
            except (OSError, orjson.JSONDecodeError) as e:
                error = CacheCorruptionError(
                    code=ErrorCode.CACHE_CORRUPTED,
                    message=f"Unreadable cache entry: {path.name}",
                    context=ErrorContext(
                        operation="load_cache",
                        file_path=str(path),
                        additional_data={"key": key},
                    ),
                    original_error=e,
                )
                log_operation_error(logger, error)
                raise error from e
            # Re-serialize so later comparisons use the canonical form
            entries[key] = serialize(value)

        self._entries = entries
        log_operation_success(
            logger,
            "load_cache",
            (time.perf_counter() - start) * 1000,
            result_info={"entries": len(entries)},
            context=context,
        )
        logger.debug("Loaded %d cache entries from %s", len(entries), self.cache_dir)
        return len(entries)

    def get(self, key: str) -> Any | None:
        """Return the value stored under ``key``, or None if absent.

        Each call returns a freshly decoded copy, so callers may mutate it.
        """
        raw = self._entries.get(key)
        if raw is None:
            return None
        return orjson.loads(raw)

    def put(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key`` if its serialization changed.

        Returns:
            True if the entry was written, False if the write was suppressed

        Raises:
            DomainError: If the key is not a safe file name
            InfrastructureError: If the value cannot be serialized or written
        """
        self._validate_key(key)
        context = ErrorContext(operation="cache_put", additional_data={"key": key})

        try:
            new_raw = serialize(value)
        except orjson.JSONEncodeError as e:
            raise InfrastructureError(
                code=ErrorCode.CACHE_SERIALIZATION_ERROR,
                message=f"Value for cache key '{key}' is not JSON-serializable",
                context=context,
                original_error=e,
            ) from e

        if self._entries.get(key) == new_raw:
            logger.debug("Cache entry '%s' unchanged, write suppressed", key)
            return False

        path = self._path_for(key)
        temp_path = path.with_name(path.name + CacheLayout.TEMP_SUFFIX)
        try:
            temp_path.write_bytes(new_raw)
            os.replace(temp_path, path)
        except OSError as e:
            error = InfrastructureError(
                code=ErrorCode.CACHE_WRITE_FAILED,
                message=f"Failed to write cache entry '{key}'",
                context=ErrorContext(
                    operation="cache_put",
                    file_path=str(path),
                    additional_data={"key": key},
                ),
                original_error=e,
            )
            log_operation_error(logger, error)
            raise error from e

        self._entries[key] = new_raw
        self.write_count += 1
        logger.debug("Wrote cache entry '%s' (%d bytes)", key, len(new_raw))
        return True

    def get_or_initialize(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the value under ``key``, initializing it on a miss.

        On a miss ``factory`` is called, its result persisted and returned.
        If ``factory`` raises, nothing is stored.
        """
        if key in self._entries:
            return self.get(key)

        value = factory()
        self.put(key, value)
        return self.get(key)

    def keys(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
