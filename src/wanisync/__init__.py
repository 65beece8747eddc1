"""WaniSync: incremental WaniKani sync with a durable local cache."""

__version__ = "0.1.0"
