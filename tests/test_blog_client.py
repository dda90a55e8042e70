"""
BlogClient end to end: the cached client talking to the real API app
through FastAPI's TestClient.
"""
import pytest

from config.settings import Settings
from myblog.client import BlogClient
from myblog.admin import PASSWORD_KEY
from tests.conftest import ADMIN_PASSWORD


class CountingSession:
    """Wraps the TestClient and records every request it forwards."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url))
        return self.inner.request(method, url, **kwargs)

    def close(self):
        pass

    def reads(self):
        return [call for call in self.calls if call[0] == "GET"]


@pytest.fixture
def config(tmp_path):
    return Settings(
        api_base_url="http://testserver/api",
        cache_db_path=tmp_path / "blog_cache.db",
        cache_ttl_seconds=300,
    )


@pytest.fixture
def http(api):
    return CountingSession(api)


@pytest.fixture
def blog(config, backend, http, clock):
    blog = BlogClient(config=config, backend=backend, session=http, clock=clock)
    yield blog
    blog.close()


def test_get_posts_is_served_from_cache_second_time(blog, http):
    first = blog.get_posts()
    second = blog.get_posts()
    assert len(first) == 3
    assert first == second
    assert len(http.reads()) == 1


def test_get_post_and_missing_post(blog, http):
    post_id = blog.get_posts()[0]["id"]
    assert blog.get_post(post_id)["id"] == post_id
    assert blog.get_post(9999) is None
    assert blog.get_post(9999) is None
    assert http.reads().count(("GET", "http://testserver/api/posts/9999")) == 1


def test_login_rejects_wrong_password(blog, backend):
    assert blog.login("wrong") is False
    assert backend.get_item(PASSWORD_KEY) is None
    assert not blog.admin.is_authenticated


def test_login_remembers_verified_password(blog, backend):
    assert blog.login(ADMIN_PASSWORD) is True
    assert backend.get_item(PASSWORD_KEY) == ADMIN_PASSWORD
    blog.logout()
    assert backend.get_item(PASSWORD_KEY) is None


def test_create_invalidates_cached_listing(blog, http):
    blog.login(ADMIN_PASSWORD)
    assert len(blog.get_posts()) == 3

    created = blog.create_post({"title": "New", "content": "<p>Fresh</p>"})
    assert created["id"]

    reads_before = len(http.reads())
    assert len(blog.get_posts()) == 4
    assert len(http.reads()) == reads_before + 1
    # Invalidation never touches the stored credential
    assert blog.admin.password == ADMIN_PASSWORD


def test_update_invalidates_cached_post(blog):
    blog.login(ADMIN_PASSWORD)
    post_id = blog.get_posts()[0]["id"]
    blog.get_post(post_id)

    blog.update_post(post_id, {"title": "Renamed", "content": "<p>Edited</p>"})
    assert blog.get_post(post_id)["title"] == "Renamed"


def test_delete_invalidates_cached_post(blog):
    blog.login(ADMIN_PASSWORD)
    post_id = blog.get_posts()[0]["id"]
    assert blog.get_post(post_id) is not None

    blog.delete_post(post_id)
    assert blog.get_post(post_id) is None
    assert len(blog.get_posts()) == 2


def test_write_without_login_fails_and_keeps_cache(blog, http):
    from myblog.errors import ContentAPIError

    blog.get_posts()
    with pytest.raises(ContentAPIError) as excinfo:
        blog.create_post({"title": "New", "content": "C"})
    assert excinfo.value.status_code == 401

    blog.get_posts()
    assert len(http.reads()) == 1


def test_stale_listing_refreshes_in_background(blog, http, clock):
    blog.get_posts()
    clock.advance(minutes=6)
    assert len(blog.get_posts()) == 3
    assert blog.cache.wait_for_revalidations(timeout=10)
    assert len(http.reads()) == 2
    assert blog.cache_stats()["revalidations"] == 1


def test_durable_tier_warms_a_new_client(config, backend, api, clock):
    first_http = CountingSession(api)
    first = BlogClient(config=config, backend=backend, session=first_http, clock=clock)
    posts = first.get_posts()
    first.close()

    second_http = CountingSession(api)
    second = BlogClient(config=config, backend=backend, session=second_http, clock=clock)
    try:
        assert second.get_posts() == posts
        assert second_http.calls == []
    finally:
        second.close()


def test_cache_disabled_always_fetches(tmp_path, backend, http, clock):
    config = Settings(
        api_base_url="http://testserver/api",
        cache_db_path=tmp_path / "blog_cache.db",
        cache_enabled=False,
    )
    blog = BlogClient(config=config, backend=backend, session=http, clock=clock)
    try:
        blog.get_posts()
        blog.get_posts()
        assert len(http.reads()) == 2
        assert blog.get_post(9999) is None
    finally:
        blog.close()


def test_default_backend_is_sqlite_file(config, http):
    blog = BlogClient(config=config, session=http)
    try:
        blog.get_posts()
        assert config.cache_db_path.exists()
    finally:
        blog.close()


def test_login_survives_unwritable_durable_tier(config, http, clock):
    from myblog.cache import MemoryBackend

    class ReadOnlyBackend(MemoryBackend):
        def set_item(self, key, value):
            raise OSError("quota exceeded")

    blog = BlogClient(config=config, backend=ReadOnlyBackend(), session=http, clock=clock)
    try:
        assert blog.login(ADMIN_PASSWORD) is True
        assert blog.admin.password == ADMIN_PASSWORD
        assert blog.create_post({"title": "New", "content": "C"})["id"]
        assert len(blog.get_posts()) == 4

        blog.logout()
        assert not blog.admin.is_authenticated
    finally:
        blog.close()
