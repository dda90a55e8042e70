"""
HTTP client for the blog content API.

Reads return explicit FetchResult variants and never raise. Writes raise
ContentAPIError on failure and invalidate the whole post cache on success.
"""
import logging
from typing import Any, Callable, Dict, Optional, Union

import requests

from myblog.cache import CacheStore, FetchFailed, FetchResult, Found, NotFound, is_unfiltered
from myblog.errors import ContentAPIError

logger = logging.getLogger("api_client")

AUTH_HEADER = "X-Auth-Key"


class ContentClient:
    """
    One method per content API call.

    Usage:
        client = ContentClient("http://127.0.0.1:8787/api", store=store)
        result = client.fetch_item(7)
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        store: Optional[CacheStore] = None,
        credential: Optional[Callable[[], Optional[str]]] = None,
    ):
        """
        Args:
            base_url: API root, e.g. ``http://127.0.0.1:8787/api``
            session: HTTP session; a new ``requests.Session`` by default
            timeout: Seconds before the transport gives up
            store: Cache cleared after every successful write
            credential: Returns the admin password sent on writes
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.store = store
        self._credential = credential or (lambda: None)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _auth_headers(self, password: Optional[str] = None) -> Dict[str, str]:
        """JSON headers plus the credential; the client never checks it."""
        if password is None:
            password = self._credential()
        return {
            "Content-Type": "application/json",
            AUTH_HEADER: password or "",
        }

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        """Issue one request, turning transport failures into ContentAPIError."""
        try:
            return self.session.request(
                method,
                self._url(path),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ContentAPIError(f"Could not reach the content API: {e}") from e

    @staticmethod
    def _json(response: requests.Response, failure_message: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ContentAPIError(failure_message, response.status_code) from e

    # ===== READS =====

    def _read(self, path: str, failure_message: str, params=None, not_found_ok=False) -> FetchResult:
        try:
            response = self._send("GET", path, params=params)
        except ContentAPIError as e:
            return FetchFailed(e.message)

        if not_found_ok and response.status_code == 404:
            return NotFound()
        if not 200 <= response.status_code < 300:
            logger.warning(f"GET {path} returned {response.status_code}")
            return FetchFailed(failure_message, response.status_code)

        try:
            return Found(self._json(response, failure_message))
        except ContentAPIError as e:
            return FetchFailed(e.message, e.status_code)

    def fetch_collection(self, category: Optional[str] = None) -> FetchResult:
        """
        GET /posts, filtered by category unless it is empty or the "all" label.

        A 404 here is a failure like any other status.
        """
        params = None if is_unfiltered(category) else {"category": category}
        return self._read("posts", "Failed to load posts", params=params)

    def fetch_item(self, post_id: Union[int, str]) -> FetchResult:
        """GET /posts/<id>; 404 becomes NotFound."""
        return self._read(f"posts/{post_id}", "Failed to load post", not_found_ok=True)

    # ===== WRITES =====

    def _write(self, method: str, path: str, failure_message: str, body=None) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"headers": self._auth_headers()}
        if body is not None:
            kwargs["json"] = body
        response = self._send(method, path, **kwargs)
        if not 200 <= response.status_code < 300:
            logger.warning(f"{method} {path} returned {response.status_code}")
            raise ContentAPIError(failure_message, response.status_code)

        if self.store is not None:
            self.store.clear_all()
        try:
            return self._json(response, failure_message)
        except ContentAPIError:
            # The write already happened; only the acknowledgement is unreadable
            logger.warning(f"{method} {path} succeeded with an undecodable body")
            return {}

    def create_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        """POST /posts. Returns ``{id, message}``."""
        return self._write("POST", "posts", "Failed to create post", body=post)

    def update_post(self, post_id: Union[int, str], post: Dict[str, Any]) -> Dict[str, Any]:
        """PUT /posts/<id>. Returns ``{message}``."""
        return self._write("PUT", f"posts/{post_id}", "Failed to update post", body=post)

    def delete_post(self, post_id: Union[int, str]) -> Dict[str, Any]:
        """DELETE /posts/<id>. Returns ``{message}``."""
        return self._write("DELETE", f"posts/{post_id}", "Failed to delete post")

    def verify_password(self, password: str) -> Dict[str, Any]:
        """
        POST /verify with a candidate password.

        Raises:
            ContentAPIError: The server rejected it or could not be reached
        """
        response = self._send("POST", "verify", headers=self._auth_headers(password))
        if not 200 <= response.status_code < 300:
            raise ContentAPIError("Wrong password", response.status_code)
        return self._json(response, "Wrong password")

    def close(self) -> None:
        self.session.close()
