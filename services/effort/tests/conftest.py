"""Shared fixtures for effort service tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone

import pytest

# Set env vars before any hg_common import.
os.environ.setdefault("HG_REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("HG_PROVER_URL", "")

from hg_common.models import HumanThresholds  # noqa: E402

from effort.prover import CommitmentProver, get_default_prover  # noqa: E402
from effort.session import ProcessSession  # noqa: E402

START = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


SessionFactory = Callable[..., ProcessSession]


# ─── Fixtures ────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_default_prover():
    get_default_prover.cache_clear()
    yield
    get_default_prover.cache_clear()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def prover(clock: FakeClock) -> CommitmentProver:
    return CommitmentProver(clock=clock)


@pytest.fixture()
def make_session() -> SessionFactory:
    """Build a session whose events are separated by the given gaps (ms).

    The first event is recorded ``lead_ms`` after the session starts; the
    session end is ``total_ms`` after start when given, otherwise the
    last event time.
    """

    def _make(
        gaps_ms: Sequence[float],
        *,
        lead_ms: float = 0.0,
        total_ms: float | None = None,
        thresholds: HumanThresholds | None = None,
    ) -> ProcessSession:
        clock = FakeClock()
        session = ProcessSession(thresholds, clock=clock)
        clock.advance(milliseconds=lead_ms)
        session.record_input()
        for gap in gaps_ms:
            clock.advance(milliseconds=gap)
            session.record_input("keydown")
        if total_ms is not None:
            clock.now = START + timedelta(milliseconds=total_ms)
        return session

    return _make


@pytest.fixture()
def human_session(make_session: SessionFactory) -> ProcessSession:
    """Ten minutes of varied typing that meets every default threshold."""
    pattern = [120.0, 340.0, 560.0, 780.0, 210.0, 450.0, 890.0, 630.0]
    gaps = pattern * 150
    return make_session(gaps, total_ms=600_000)
