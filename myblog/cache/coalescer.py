"""
Sharing of in-flight content fetches.

Readers that miss the cache for the same key at the same time wait on one
upstream call instead of each issuing their own. Fetches are only shared
within one cache generation: a reader that arrives after an invalidation
never joins a fetch that started before it.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("cache.coalescer")


@dataclass
class PendingFetch:
    """One upstream fetch and everyone waiting on it."""
    done: threading.Event = field(default_factory=threading.Event)
    result: Optional[Any] = None
    error: Optional[BaseException] = None
    waiters: int = 0


class RequestCoalescer:
    """
    Joins concurrent fetches for the same key and generation.

    The first caller runs ``fetch_fn``; later callers block until it
    finishes and receive the same result, or the same exception.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Max seconds a joining caller waits; None waits as long
                as the transport does
        """
        self._pending: Dict[Tuple[str, int], PendingFetch] = {}
        self._lock = threading.Lock()
        self._timeout = timeout

    def run(self, key: str, fetch_fn: Callable[[], Any], generation: int = 0) -> Any:
        """
        Run ``fetch_fn`` for ``key`` unless a fetch for it is already running
        in the same generation.

        Raises:
            TimeoutError: If a joined fetch does not finish within the timeout
            Exception: Whatever ``fetch_fn`` raised
        """
        slot = (key, generation)
        with self._lock:
            pending = self._pending.get(slot)
            leader = pending is None
            if leader:
                pending = PendingFetch()
                self._pending[slot] = pending
            else:
                pending.waiters += 1
                logger.debug(f"Joining in-flight fetch for {key} (waiters: {pending.waiters})")

        if leader:
            try:
                pending.result = fetch_fn()
            except Exception as e:
                pending.error = e
            finally:
                with self._lock:
                    self._pending.pop(slot, None)
                pending.done.set()
        elif not pending.done.wait(timeout=self._timeout):
            raise TimeoutError(f"Fetch for {key} did not finish within {self._timeout}s")

        if pending.error is not None:
            raise pending.error
        return pending.result

    def in_flight(self) -> List[str]:
        """Keys with a fetch currently running."""
        with self._lock:
            return sorted({key for key, _ in self._pending})
