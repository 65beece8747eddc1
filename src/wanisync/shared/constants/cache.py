"""
Cache Constants

Key naming and file layout of the durable cache.
"""


class CacheLayout:
    """On-disk layout of the cache directory."""

    DEFAULT_DIR = "cache"
    FILE_SUFFIX = ".json"
    TEMP_SUFFIX = ".tmp"


class CacheKeys:
    """Cache key naming rules."""

    WATERMARK_SUFFIX = "-watermark"
    RESOURCE_SEPARATOR = "-"
    # Keys become file names, so only these characters are accepted
    ALLOWED_PATTERN = r"^[A-Za-z0-9_.-]+$"
