"""
Two-tier cache entry store.

Tier 1 is an in-memory dict checked first. Tier 2 is a durable, shared
key-value backend namespaced by a fixed prefix. Tier 2 is best-effort: any
failure reading or writing it is logged and ignored.
"""
import json
import logging
import threading
from typing import Any, Callable, Dict, Optional

from .backends import KeyValueBackend
from .core import CacheEntry, now_ms

logger = logging.getLogger("cache.store")

DEFAULT_PREFIX = "blog_cache_"


class CacheStore:
    """
    Namespaced storage of CacheEntry values across both tiers.

    Usage:
        store = CacheStore(SQLiteBackend(path))
        store.put("posts_all", posts)
        entry = store.get("posts_all")
    """

    def __init__(
        self,
        backend: Optional[KeyValueBackend] = None,
        prefix: str = DEFAULT_PREFIX,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            backend: Durable tier; None keeps the store memory-only
            prefix: Namespace for every durable key this store owns
            clock: Returns the current time in milliseconds
        """
        self._memory: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._backend = backend
        self._generation = 0
        self._cleared_at: Optional[int] = None
        self.prefix = prefix
        self.clock = clock

    @property
    def generation(self) -> int:
        """Incremented by every clear_all()."""
        with self._lock:
            return self._generation

    def _durable_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Look up an entry, warming Tier 1 from Tier 2 on a memory miss.

        A corrupt or unreadable durable payload counts as absent, and so
        does one written before the last clear_all() that the durable tier
        failed to remove.
        """
        with self._lock:
            entry = self._memory.get(key)
            if entry is not None:
                return entry
            generation = self._generation

        entry = self._read_durable(key)
        if entry is None:
            return None

        with self._lock:
            if generation != self._generation:
                return None
            if self._cleared_at is not None and entry.timestamp <= self._cleared_at:
                logger.debug(f"Ignoring durable entry left over from before clear: {key}")
                return None
            # A concurrent put may have landed while we were reading
            current = self._memory.get(key)
            if current is not None:
                return current
            self._memory[key] = entry
        logger.debug(f"Warmed memory tier from durable tier: {key}")
        return entry

    def _read_durable(self, key: str) -> Optional[CacheEntry]:
        if self._backend is None:
            return None
        try:
            raw = self._backend.get_item(self._durable_key(key))
            if raw is None:
                return None
            return CacheEntry.from_dict(key, json.loads(raw))
        except Exception as e:
            logger.debug(f"Ignoring unreadable durable entry {key}: {e}")
            return None

    def put(self, key: str, data: Any, generation: Optional[int] = None) -> bool:
        """
        Write a new entry stamped with the current time.

        Args:
            key: Cache key
            data: JSON-serializable payload (None records a confirmed absence)
            generation: When given, the write is dropped if clear_all() ran
                since that generation was read

        Returns:
            True if the entry was written
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug(f"Dropping write from before invalidation: {key}")
                return False
            entry = CacheEntry(key=key, data=data, timestamp=self.clock())
            self._memory[key] = entry

            # Both tiers are written under the lock so clear_all() cannot
            # interleave and leave a durable copy of a cleared entry
            if self._backend is not None:
                try:
                    self._backend.set_item(self._durable_key(key), json.dumps(entry.to_dict()))
                except Exception as e:
                    logger.debug(f"Durable tier write failed for {key}: {e}")
        return True

    def clear_all(self) -> int:
        """
        Drop every entry this store owns in both tiers.

        Keys outside the prefix are left alone.

        Returns:
            Number of memory entries cleared
        """
        with self._lock:
            count = len(self._memory)
            self._memory.clear()
            self._generation += 1
            self._cleared_at = self.clock()

            if self._backend is not None:
                try:
                    owned = [k for k in self._backend.keys() if k.startswith(self.prefix)]
                    for durable_key in owned:
                        self._backend.remove_item(durable_key)
                except Exception as e:
                    logger.warning(f"Durable tier clear failed, older entries will be ignored: {e}")

        logger.info(f"Cleared {count} cache entries")
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._memory)
