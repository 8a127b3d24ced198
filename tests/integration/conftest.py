"""
Integration test fixtures for HumanGate.

Uses ``testcontainers`` to spin up a disposable Redis container for the
durable-store tests. When Docker is not available the Redis-backed tests
are skipped; the in-memory pipeline tests always run.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Iterator

import pytest
import redis as _redis
from testcontainers.redis import RedisContainer

from hg_common.messaging.redis_client import RedisClient


# ---------------------------------------------------------------------------
# Container fixtures (session-scoped, one per test run)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def redis_container() -> Iterator[RedisContainer]:
    """Start a disposable Redis container for the test session.

    Uses a direct TCP-based readiness check instead of the default
    ``docker exec`` approach for Docker Desktop compatibility.
    """
    r = RedisContainer(image="redis:7-alpine")
    r._connect = lambda: None  # type: ignore[assignment]
    try:
        r.start()
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"Docker unavailable: {exc}")

    port = int(r.get_exposed_port(6379))
    deadline = time.monotonic() + 30
    while time.monotonic() < deadline:
        try:
            client = _redis.Redis(host="127.0.0.1", port=port, socket_connect_timeout=2)
            client.ping()
            client.close()
            break
        except _redis.RedisError:
            time.sleep(0.5)
    else:
        r.stop()
        raise TimeoutError("Redis container did not become ready in 30s")

    yield r
    r.stop()


@pytest.fixture(scope="session")
def redis_url(redis_container: RedisContainer) -> str:
    """Return the Redis connection URL for the test container."""
    port = redis_container.get_exposed_port(6379)
    return f"redis://127.0.0.1:{port}/0"


@pytest.fixture()
async def redis_client(redis_url: str) -> AsyncIterator[RedisClient]:
    """A connected ``RedisClient`` on a freshly flushed database."""
    client = RedisClient(redis_url)
    await client.connect()
    await client.redis.flushdb()
    yield client
    await client.close()
