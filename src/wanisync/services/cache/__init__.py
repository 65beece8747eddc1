"""Durable key-value cache."""

from .store import CacheStore, serialize

__all__ = ["CacheStore", "serialize"]
