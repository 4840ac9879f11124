"""
Shared pytest fixtures for RecipeBox tests.

This module provides common fixtures including:
- FakeRedis: in-memory async Redis double for the commands RecipeBox uses
- FakeClock: controllable UTC clock for expiry windows
- FastAPI test clients wired for each credential strategy
"""

import os
import sys
import time
from collections import defaultdict
from datetime import UTC, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set

import pytest
import redis.asyncio as redis
from fastapi.testclient import TestClient

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from recipebox.main import create_app  # noqa: E402

JWT_SECRET = "test-secret-that-is-long-enough-for-hs256-signing"
STORE_URL = "redis://store:6379/0"
CACHE_URL = "redis://cache:6379/0"


# =============================================================================
# Redis Double
# =============================================================================


class FakeRedis:
    """
    In-memory stand-in for ``redis.asyncio.Redis`` with decode_responses=True.

    Every command is recorded in ``commands`` as ``(name, key)``. Names listed
    in ``fail_commands`` raise ``redis.ConnectionError`` to simulate outages.
    """

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.sets: Dict[str, Set[str]] = {}
        self.expiry: Dict[str, float] = {}
        self.commands: List[tuple] = []
        self.fail_commands: Set[str] = set()
        self.closed = False

    def _record(self, name: str, key: Optional[str] = None) -> None:
        self.commands.append((name, key))
        if name in self.fail_commands or "*" in self.fail_commands:
            raise redis.ConnectionError(f"simulated failure on {name}")

    def _purge(self, key: str) -> None:
        deadline = self.expiry.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            self.data.pop(key, None)
            self.expiry.pop(key, None)

    def calls(self, name: str) -> List[Optional[str]]:
        return [key for command, key in self.commands if command == name]

    async def get(self, key: str) -> Optional[str]:
        self._record("get", key)
        self._purge(key)
        return self.data.get(key)

    async def set(self, key: str, value, ex: Optional[int] = None, nx: bool = False, xx: bool = False):
        self._record("set", key)
        self._purge(key)
        exists = key in self.data
        if (nx and exists) or (xx and not exists):
            return None

        self.data[key] = value.decode("utf-8") if isinstance(value, bytes) else str(value)
        if ex is not None:
            self.expiry[key] = time.monotonic() + ex
        else:
            self.expiry.pop(key, None)
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self._record("delete", key)
            self._purge(key)
            if self.data.pop(key, None) is not None:
                removed += 1
            if self.sets.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        found = 0
        for key in keys:
            self._record("exists", key)
            self._purge(key)
            if key in self.data or key in self.sets:
                found += 1
        return found

    async def sadd(self, key: str, *members: str) -> int:
        self._record("sadd", key)
        current = self.sets.setdefault(key, set())
        added = len(set(members) - current)
        current.update(members)
        return added

    async def srem(self, key: str, *members: str) -> int:
        self._record("srem", key)
        current = self.sets.get(key, set())
        removed = len(current & set(members))
        current.difference_update(members)
        return removed

    async def smembers(self, key: str) -> Set[str]:
        self._record("smembers", key)
        return set(self.sets.get(key, set()))

    async def mget(self, keys: Iterable[str]) -> List[Optional[str]]:
        keys = list(keys)
        self._record("mget", ",".join(keys))
        result = []
        for key in keys:
            self._purge(key)
            result.append(self.data.get(key))
        return result

    async def ping(self) -> bool:
        self._record("ping")
        return True

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """
    Callable clock that only moves when told to.

    Starts at the real current time so cookie jars keep the cookies it dates.
    """

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime.now(UTC).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def redis_servers():
    """Fake Redis instances keyed by URL."""
    return defaultdict(FakeRedis)


@pytest.fixture
def base_env(monkeypatch):
    monkeypatch.setenv("REDIS_URL", STORE_URL)
    monkeypatch.setenv("CACHE_REDIS_URL", CACHE_URL)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    return monkeypatch


def _client_for(strategy: str, base_env, redis_servers, clock):
    base_env.setenv("AUTH_STRATEGY", strategy)

    def client_factory(url, **kwargs):
        return redis_servers[url]

    app = create_app(client_factory=client_factory, clock=clock)
    return TestClient(app)


@pytest.fixture
def signed_client(base_env, redis_servers, clock):
    """Test client for a deployment using signed tokens."""
    with _client_for("signed", base_env, redis_servers, clock) as client:
        yield client


@pytest.fixture
def session_client(base_env, redis_servers, clock):
    """Test client for a deployment using server-side sessions."""
    with _client_for("session", base_env, redis_servers, clock) as client:
        yield client


@pytest.fixture
def store(redis_servers):
    return redis_servers[STORE_URL]


@pytest.fixture
def cache(redis_servers):
    return redis_servers[CACHE_URL]
