"""
Core cache data structures and fetch result variants.
"""
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry:
    """
    A cached payload and the instant it was written.

    Entries are never mutated; a refresh replaces the whole entry.
    ``data`` of ``None`` records a confirmed absence.
    """
    key: str
    data: Any
    timestamp: int  # milliseconds since epoch

    def age_ms(self, now: int) -> int:
        """Milliseconds since the entry was written."""
        return now - self.timestamp

    def is_fresh(self, now: int, ttl_ms: int) -> bool:
        """Check if the entry is younger than the TTL."""
        return self.age_ms(now) < ttl_ms

    def to_dict(self) -> Dict[str, Any]:
        """Serialized shape stored in the durable tier."""
        return {"data": self.data, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, key: str, payload: Any) -> Optional["CacheEntry"]:
        """
        Rebuild an entry from its durable form.

        Returns None when the payload is not a dict or has no usable timestamp.
        """
        if not isinstance(payload, dict) or "data" not in payload:
            return None
        timestamp = payload.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            return None
        return cls(key=key, data=payload["data"], timestamp=int(timestamp))


# ===== FETCH RESULTS =====

@dataclass(frozen=True)
class Found:
    """The content API returned a payload."""
    data: Any


@dataclass(frozen=True)
class NotFound:
    """The content API confirmed the item does not exist."""


@dataclass(frozen=True)
class FetchFailed:
    """Any other outcome: transport error, bad status, undecodable body."""
    message: str
    status_code: Optional[int] = None


FetchResult = Union[Found, NotFound, FetchFailed]
