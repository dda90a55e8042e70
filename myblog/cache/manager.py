"""
Read-through cache with stale-while-revalidate for blog posts.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Optional, Protocol, Set, Union

from myblog.errors import ContentAPIError

from .coalescer import RequestCoalescer
from .core import FetchFailed, FetchResult, Found, NotFound
from .policies import DEFAULT_TTL_SECONDS, collection_key, item_key, ttl_ms
from .store import CacheStore

logger = logging.getLogger("cache.manager")


def unwrap(result: FetchResult) -> Any:
    """
    The value a fetch result stands for: the payload, or None when absent.

    Raises:
        ContentAPIError: The fetch failed
    """
    if isinstance(result, Found):
        return result.data
    if isinstance(result, NotFound):
        return None
    if isinstance(result, FetchFailed):
        raise ContentAPIError(result.message, result.status_code)
    raise TypeError(f"Unexpected fetch result: {result!r}")


class PostFetcher(Protocol):
    """The reads the manager needs from the content client."""

    def fetch_collection(self, category: Optional[str] = None) -> FetchResult:
        ...

    def fetch_item(self, post_id: Union[int, str]) -> FetchResult:
        ...


class CacheManager:
    """
    Decides when to serve cached posts, when to block on the network, and
    when to refresh in the background.

    - Fresh entry: returned, no network call
    - Stale entry: returned, one background refresh scheduled
    - No entry: fetched synchronously, stored, returned

    Background refreshes are fire-and-forget ``Future``s on a thread pool.
    They are never awaited by the read that triggered them, cannot be
    cancelled, and may not finish if the process exits first; an unfinished
    refresh just leaves the stale entry for the next read to retry.
    """

    def __init__(
        self,
        fetcher: PostFetcher,
        store: CacheStore,
        ttl_seconds: Union[int, float] = DEFAULT_TTL_SECONDS,
        max_revalidation_workers: int = 4,
        coalesce_timeout: Optional[float] = None,
    ):
        """
        Args:
            fetcher: Issues the actual content API reads
            store: Two-tier entry store; its clock drives freshness checks
            ttl_seconds: Age at which an entry turns stale
            max_revalidation_workers: Thread pool size for background refreshes
            coalesce_timeout: Max seconds to wait on another caller's fetch
        """
        self._fetcher = fetcher
        self._store = store
        self._ttl_ms = ttl_ms(ttl_seconds)
        self._coalescer = RequestCoalescer(timeout=coalesce_timeout)

        self._revalidation_pool = ThreadPoolExecutor(
            max_workers=max_revalidation_workers,
            thread_name_prefix="cache-revalidate",
        )
        self._revalidating: Set[str] = set()
        self._futures: Set[Future] = set()
        self._revalidating_lock = threading.Lock()

        self._stats_lock = threading.Lock()
        self._stats = {
            "hits_fresh": 0,
            "hits_stale": 0,
            "misses": 0,
            "revalidations": 0,
            "revalidation_failures": 0,
        }

    @property
    def store(self) -> CacheStore:
        return self._store

    def get_collection(self, category: Optional[str] = None) -> Any:
        """
        Post summaries, optionally filtered by category.

        Raises:
            ContentAPIError: Nothing cached and the fetch failed
        """
        return self._read(
            collection_key(category),
            lambda: self._fetcher.fetch_collection(category),
        )

    def get_item(self, post_id: Union[int, str]) -> Optional[Any]:
        """
        One full post, or None if the server confirmed it does not exist.

        A confirmed absence is cached like any other result; transient
        failures are not.

        Raises:
            ContentAPIError: Nothing cached and the fetch failed
        """
        return self._read(
            item_key(post_id),
            lambda: self._fetcher.fetch_item(post_id),
        )

    def _read(self, key: str, fetch_fn: Callable[[], FetchResult]) -> Any:
        entry = self._store.get(key)

        if entry is None:
            logger.info(f"CACHE MISS: {key}")
            self._count("misses")
            generation = self._store.generation
            result = self._coalescer.run(key, fetch_fn, generation)
            return self._apply(key, result, generation)

        now = self._store.clock()
        if entry.is_fresh(now, self._ttl_ms):
            logger.debug(f"CACHE HIT (fresh): {key} [age={entry.age_ms(now)}ms]")
            self._count("hits_fresh")
            return entry.data

        logger.info(f"CACHE HIT (stale, revalidating): {key} [age={entry.age_ms(now)}ms]")
        self._count("hits_stale")
        self._trigger_background_revalidate(key, fetch_fn)
        return entry.data

    def _apply(self, key: str, result: FetchResult, generation: int) -> Any:
        """Store a successful result and return its value, or raise on failure."""
        value = unwrap(result)
        self._store.put(key, value, generation=generation)
        return value

    def _trigger_background_revalidate(
        self,
        key: str,
        fetch_fn: Callable[[], FetchResult],
    ) -> Optional[Future]:
        """Schedule a refresh of ``key`` unless one is already running."""
        with self._revalidating_lock:
            if key in self._revalidating:
                logger.debug(f"Already revalidating: {key}")
                return None
            self._revalidating.add(key)

        generation = self._store.generation

        def do_revalidate():
            try:
                self._apply(key, fetch_fn(), generation)
                self._count("revalidations")
                logger.debug(f"Background revalidation complete: {key}")
            except Exception as e:
                self._count("revalidation_failures")
                logger.warning(f"Background revalidation failed: {key} - {e}")
            finally:
                with self._revalidating_lock:
                    self._revalidating.discard(key)

        try:
            future = self._revalidation_pool.submit(do_revalidate)
        except RuntimeError as e:
            # Pool already shut down; the stale entry stays for the next read
            logger.debug(f"Skipping revalidation of {key}: {e}")
            with self._revalidating_lock:
                self._revalidating.discard(key)
            return None

        with self._revalidating_lock:
            self._futures.add(future)
        future.add_done_callback(self._forget_future)
        return future

    def _forget_future(self, future: Future) -> None:
        with self._revalidating_lock:
            self._futures.discard(future)

    def _count(self, stat: str) -> None:
        with self._stats_lock:
            self._stats[stat] += 1

    def wait_for_revalidations(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every scheduled background refresh has finished.

        Returns:
            True if none are left running
        """
        with self._revalidating_lock:
            pending = list(self._futures)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def clear(self) -> int:
        """Invalidate every cached entry. Returns number of entries cleared."""
        return self._store.clear_all()

    def shutdown(self, wait_for_pending: bool = False) -> None:
        """Stop accepting background refreshes."""
        self._revalidation_pool.shutdown(wait=wait_for_pending)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._stats_lock:
            stats = dict(self._stats)
        total_hits = stats["hits_fresh"] + stats["hits_stale"]
        total_requests = total_hits + stats["misses"]
        hit_rate = (total_hits / total_requests * 100) if total_requests > 0 else 0

        with self._revalidating_lock:
            revalidating_count = len(self._revalidating)

        stats.update({
            "entries": len(self._store),
            "hit_rate_percent": round(hit_rate, 1),
            "in_flight": self._coalescer.in_flight(),
            "revalidating_count": revalidating_count,
        })
        return stats
