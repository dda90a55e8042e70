"""
Freshness policy and cache key derivation.
"""
from typing import Optional, Union

# Posts stay fresh for 5 minutes
DEFAULT_TTL_SECONDS = 300

# Category label the front-end uses for "no filter"
ALL_CATEGORIES_LABEL = "全部"

COLLECTION_KEY_PREFIX = "posts_"
ITEM_KEY_PREFIX = "post_"


def ttl_ms(ttl_seconds: Union[int, float]) -> int:
    """Convert a TTL in seconds to milliseconds."""
    return int(ttl_seconds * 1000)


def collection_key(category: Optional[str] = None) -> str:
    """
    Key for a post listing.

    ``posts_all`` when unfiltered, ``posts_<category>`` otherwise.
    """
    return f"{COLLECTION_KEY_PREFIX}{category or 'all'}"


def item_key(post_id: Union[int, str]) -> str:
    """Key for a single post."""
    return f"{ITEM_KEY_PREFIX}{post_id}"


def is_unfiltered(category: Optional[str]) -> bool:
    """True when a listing request should not send a category filter."""
    return not category or category == ALL_CATEGORIES_LABEL
