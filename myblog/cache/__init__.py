"""
Two-tier post cache with request coalescing and stale-while-revalidate.
"""
from .core import CacheEntry, FetchFailed, FetchResult, Found, NotFound, now_ms
from .backends import KeyValueBackend, MemoryBackend, SQLiteBackend
from .store import CacheStore
from .policies import (
    ALL_CATEGORIES_LABEL,
    DEFAULT_TTL_SECONDS,
    collection_key,
    item_key,
    is_unfiltered,
)
from .coalescer import RequestCoalescer
from .manager import CacheManager, unwrap

__all__ = [
    # Core types
    "CacheEntry",
    "FetchFailed",
    "FetchResult",
    "Found",
    "NotFound",
    "now_ms",
    # Storage
    "KeyValueBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "CacheStore",
    # Policies
    "ALL_CATEGORIES_LABEL",
    "DEFAULT_TTL_SECONDS",
    "collection_key",
    "item_key",
    "is_unfiltered",
    # Coalescing
    "RequestCoalescer",
    # Manager
    "CacheManager",
    "unwrap",
]
