"""
Blog client: the cached content API surface used by front-ends and scripts.
"""
import logging
from typing import Any, Dict, List, Optional, Union

import requests
from dotenv import load_dotenv

from config.settings import Settings, settings as default_settings
from myblog.admin import AdminSession
from myblog.api_client import ContentClient
from myblog.cache import CacheManager, CacheStore, KeyValueBackend, SQLiteBackend, now_ms, unwrap
from myblog.errors import ContentAPIError

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("blog.client")


class BlogClient:
    """
    Wires the durable backend, cache store, content client, cache manager
    and admin session together.

    Usage:
        blog = BlogClient()
        posts = blog.get_posts("设计思考")
        post = blog.get_post(7)
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        backend: Optional[KeyValueBackend] = None,
        session: Optional[requests.Session] = None,
        clock=now_ms,
    ):
        """
        Args:
            config: Settings to use; the process-wide settings by default
            backend: Durable tier; a SQLiteBackend at ``cache_db_path`` by default
            session: HTTP session handed to the content client
            clock: Millisecond clock used for cache freshness
        """
        self.config = config or default_settings
        self.backend = backend if backend is not None else SQLiteBackend(self.config.cache_db_path)
        self.store = CacheStore(self.backend, prefix=self.config.cache_prefix, clock=clock)

        self.api = ContentClient(
            self.config.api_base_url,
            session=session,
            timeout=self.config.request_timeout,
            store=self.store,
            credential=lambda: self.admin.password,
        )
        self.admin = AdminSession(self.api, self.backend)
        self.cache = CacheManager(
            self.api,
            self.store,
            ttl_seconds=self.config.cache_ttl_seconds,
            max_revalidation_workers=self.config.max_revalidation_workers,
        )

    # ===== READS =====

    def get_posts(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        """Post summaries, newest first, optionally filtered by category."""
        if not self.config.cache_enabled:
            return unwrap(self.api.fetch_collection(category))
        return self.cache.get_collection(category)

    def get_post(self, post_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """One full post, or None if it does not exist."""
        if not self.config.cache_enabled:
            return unwrap(self.api.fetch_item(post_id))
        return self.cache.get_item(post_id)

    # ===== WRITES =====

    def create_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.create_post(post)

    def update_post(self, post_id: Union[int, str], post: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.update_post(post_id, post)

    def delete_post(self, post_id: Union[int, str]) -> Dict[str, Any]:
        return self.api.delete_post(post_id)

    # ===== ADMIN =====

    def verify_password(self, password: str) -> Dict[str, Any]:
        return self.api.verify_password(password)

    def login(self, password: str) -> bool:
        """Verify and remember the admin password. Returns False if rejected."""
        try:
            self.admin.login(password)
        except ContentAPIError as e:
            logger.info(f"Admin login rejected: {e.message}")
            return False
        return True

    def logout(self) -> None:
        self.admin.logout()

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.get_stats()

    def close(self) -> None:
        self.cache.shutdown()
        self.api.close()


# Global blog client instance
_blog_client: Optional[BlogClient] = None


def get_blog_client() -> BlogClient:
    """Get or create the global blog client."""
    global _blog_client
    if _blog_client is None:
        _blog_client = BlogClient()
    return _blog_client
