"""WaniSync Shared Module.

This package contains shared constants, error handling and logging used across WaniSync.
"""

__all__ = ["constants", "errors", "logging"]
