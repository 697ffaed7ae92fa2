# tests/conftest.py
import os
import pytest
from fastapi.testclient import TestClient

# In-memory SQLite and the in-process cache; the sweeper is exercised directly.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("CACHE_SWEEP_INTERVAL_SECONDS", "0")

from antiresume.main import app  # import after env is set
from antiresume.database import Base, engine
from antiresume.models.profile import Resume, UserProfile
from antiresume.services.cache_backends import InProcessLRUCache
from antiresume.services.cache_factory import set_cache


class FakeClock:
    """Manually advanced clock for TTL tests."""
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """A fresh process cache per test, driven by the fake clock."""
    c = InProcessLRUCache(capacity=1000, clock=clock)
    set_cache(c)
    yield c
    set_cache(None)


@pytest.fixture
def db_tables():
    """Create the schema and wipe rows after each test."""
    Base.metadata.create_all(engine)
    yield
    with engine.begin() as conn:
        conn.execute(Resume.__table__.delete())
        conn.execute(UserProfile.__table__.delete())


@pytest.fixture(scope="function")
def client(db_tables, cache):
    """A FastAPI TestClient for calling API endpoints."""
    with TestClient(app) as c:
        yield c
