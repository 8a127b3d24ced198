"""Shared pytest fixtures for cross-service integration tests.

Provides environment defaults, a manually advanced clock, and a
realistic submitting identity.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest

# Set env vars before any hg_common import.
os.environ.setdefault("HG_REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("HG_PROVER_URL", "")

START = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock shared by the trust and effort services."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def identity() -> str:
    return "did:key:z6MkpTHR8VNsBxYAAWHut2Geadd9jSwuBV8xRoAnwWsdvktH"
