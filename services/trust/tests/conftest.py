"""Shared fixtures for trust service tests."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest

# Set env vars before any hg_common import.
os.environ.setdefault("HG_REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("HG_LOG_LEVEL", "DEBUG")

from hg_common.storage import InMemoryTrustStorage  # noqa: E402

from trust.config import RateLimitConfig, ReputationConfig  # noqa: E402
from trust.engine import TrustEngine  # noqa: E402

START = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


# ─── Fixtures ────────────────────────────────────────────────


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def identity() -> str:
    """A realistic DID longer than the 20-character log prefix."""
    return "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"


@pytest.fixture()
def storage() -> InMemoryTrustStorage:
    return InMemoryTrustStorage()


@pytest.fixture()
def rate_config() -> RateLimitConfig:
    return RateLimitConfig()


@pytest.fixture()
def reputation_config() -> ReputationConfig:
    return ReputationConfig()


@pytest.fixture()
def engine(clock: FakeClock) -> TrustEngine:
    """An engine with default configuration and no durable store."""
    return TrustEngine(clock=clock)


@pytest.fixture()
def stored_engine(clock: FakeClock, storage: InMemoryTrustStorage) -> TrustEngine:
    """An engine mirroring into an in-memory durable store."""
    return TrustEngine(storage=storage, clock=clock)
