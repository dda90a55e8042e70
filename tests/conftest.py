"""
Shared fixtures: an isolated in-memory database behind the API app, a
controllable millisecond clock, and a scripted post fetcher.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import settings
from myblog.cache import CacheStore, FetchFailed, MemoryBackend, NotFound
from myblog.db import get_db, init_db
from myblog.main import app

ADMIN_PASSWORD = "test-secret"
ADMIN_HEADERS = {"X-Auth-Key": ADMIN_PASSWORD}


@pytest.fixture(autouse=True)
def _admin_password(monkeypatch):
    """Pin the server's shared secret regardless of any local .env."""
    monkeypatch.setattr(settings, "admin_password", ADMIN_PASSWORD)


@pytest.fixture
def engine():
    """Fresh in-memory database seeded with the sample posts."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine, seed=True)
    yield engine
    engine.dispose()


@pytest.fixture
def api(engine):
    """TestClient whose requests hit the in-memory database."""
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_767_225_600_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.now += int((minutes * 60 + seconds) * 1000)


class FakeFetcher:
    """Returns scripted FetchResults and records every call."""

    def __init__(self):
        self.collections = {}
        self.items = {}
        self.calls = []

    def fetch_collection(self, category=None):
        self.calls.append(("collection", category))
        result = self.collections.get(category, FetchFailed("Failed to load posts", 500))
        if isinstance(result, Exception):
            raise result
        return result

    def fetch_item(self, post_id):
        self.calls.append(("item", post_id))
        result = self.items.get(post_id, NotFound())
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend, clock):
    return CacheStore(backend, prefix="blog_cache_", clock=clock)


@pytest.fixture
def fetcher():
    return FakeFetcher()
