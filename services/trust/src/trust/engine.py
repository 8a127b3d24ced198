"""
Trust engine facade.

``TrustEngine`` wires the submission history, rate limiter, reputation
ledger and anomaly log around one process-scoped ``TrustState``. Every
public operation serialises on the identity's lock and lazily hydrates
that identity from the durable store until one read of it succeeds.
Durable writes are queued behind the in-memory update and never block
or fail the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from hg_common.config import Settings, get_settings
from hg_common.errors import PersistenceError
from hg_common.logging import short_identity
from hg_common.models import (
    AnomalyLogEntry,
    RateLimitResult,
    ReputationEvent,
    ReputationRecord,
    SubmissionRecord,
    SubmissionStats,
)
from hg_common.storage import TrustStorage
from hg_common.utils import parse_timestamp, utc_now

from trust.anomaly_log import DEFAULT_CAPACITY, AnomalyLog
from trust.config import RateLimitConfig, ReputationConfig
from trust.history import SubmissionHistory
from trust.locks import IdentityLocks
from trust.persistence import DEFAULT_TIMEOUT_S, PersistenceMirror
from trust.rate_limiter import RateLimiter
from trust.reputation import ReputationLedger
from trust.state import TrustState

logger = structlog.get_logger()


class TrustEngine:
    """Behavioral trust checks for proof submitters.

    Args:
        state: Process-scoped state; a fresh empty one when omitted.
        storage: Durable store to hydrate from and mirror into, or ``None``.
        rate_config: Rate-limit thresholds.
        reputation_config: Reputation bounds, deltas and decay.
        anomaly_capacity: Anomaly entries kept per identity.
        persistence_timeout_s: Timeout for each durable-store call.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        state: TrustState | None = None,
        storage: TrustStorage | None = None,
        *,
        rate_config: RateLimitConfig | None = None,
        reputation_config: ReputationConfig | None = None,
        anomaly_capacity: int = DEFAULT_CAPACITY,
        persistence_timeout_s: float = DEFAULT_TIMEOUT_S,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._state = state if state is not None else TrustState()
        self._clock = clock
        self._locks = IdentityLocks()
        self._mirror = PersistenceMirror(storage, timeout_s=persistence_timeout_s)
        self._history = SubmissionHistory(self._state)
        self._anomaly_log = AnomalyLog(
            self._state, self._mirror, capacity=anomaly_capacity, clock=clock
        )
        self._limiter = RateLimiter(self._history, self._anomaly_log, rate_config, clock=clock)
        self._reputation = ReputationLedger(
            self._state, self._anomaly_log, self._mirror, reputation_config, clock=clock
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        storage: TrustStorage | None = None,
        *,
        state: TrustState | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> TrustEngine:
        """Build an engine configured from ``HG_`` settings."""
        settings = settings or get_settings()
        return cls(
            state,
            storage,
            rate_config=RateLimitConfig.from_settings(settings),
            reputation_config=ReputationConfig.from_settings(settings),
            anomaly_capacity=settings.anomaly_log_capacity,
            persistence_timeout_s=settings.persistence_timeout_s,
            clock=clock,
        )

    @classmethod
    async def create(cls, storage: TrustStorage | None = None, **kwargs) -> TrustEngine:
        """Construct an engine and eagerly hydrate it from *storage*."""
        engine = cls(storage=storage, **kwargs)
        await engine.hydrate()
        return engine

    # ── properties ──

    @property
    def state(self) -> TrustState:
        return self._state

    @property
    def locks(self) -> IdentityLocks:
        return self._locks

    @property
    def rate_config(self) -> RateLimitConfig:
        return self._limiter.config

    @property
    def reputation_config(self) -> ReputationConfig:
        return self._reputation.config

    # ── hydration ──

    async def hydrate(self) -> int:
        """Load every identity known to the durable store.

        Returns:
            Number of identities hydrated by this call.
        """
        identities = await self._mirror.read("list_identities", lambda s: s.list_identities(), [])
        loaded = 0
        for identity in identities:
            async with self._locks.hold(identity):
                if await self._ensure_hydrated(identity):
                    loaded += 1
        logger.info("trust_state_hydrated", identities=loaded)
        return loaded

    async def _ensure_hydrated(self, identity: str) -> bool:
        if identity in self._state.hydrated:
            return False
        if not self._mirror.enabled:
            self._state.hydrated.add(identity)
            return False

        try:
            record = await self._mirror.fetch(
                "get_reputation", lambda s: s.get_reputation(identity), identity=identity
            )
            submissions = await self._mirror.fetch(
                "get_submissions", lambda s: s.get_submissions(identity), identity=identity
            )
            lines = await self._mirror.fetch(
                "get_anomalies", lambda s: s.get_anomalies(identity), identity=identity
            )
        except PersistenceError:
            # Retried on the next operation for this identity.
            self._state.deferred.setdefault(identity, [])
            return False

        self._state.hydrated.add(identity)
        self._reputation.restore(identity, record)
        self._history.load(identity, submissions)
        self._anomaly_log.load(identity, lines)
        return True

    # ── submissions ──

    async def check_rate_limit(self, identity: str, timestamp: datetime | str) -> RateLimitResult:
        """Rate-limit decision for a submission by *identity* at *timestamp*.

        The caller must not accept the proof when ``allowed`` is ``False``.
        """
        ts = parse_timestamp(timestamp)
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._limiter.check(identity, ts)

    async def record_submission(
        self,
        identity: str,
        content_hash: str,
        timestamp: datetime | str,
        result: RateLimitResult | None = None,
    ) -> SubmissionRecord:
        """Record an accepted submission and credit the identity.

        A ``proof_success`` event is applied unless *result* says the
        submission was not allowed.
        """
        ts = parse_timestamp(timestamp)
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._record(identity, content_hash, ts, result)

    async def admit(
        self, identity: str, content_hash: str, timestamp: datetime | str
    ) -> RateLimitResult:
        """Check and, if allowed, record a submission as one atomic step."""
        ts = parse_timestamp(timestamp)
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            result = self._limiter.check(identity, ts)
            if result.allowed:
                self._record(identity, content_hash, ts, result)
            return result

    def _record(
        self,
        identity: str,
        content_hash: str,
        timestamp: datetime,
        result: RateLimitResult | None,
    ) -> SubmissionRecord:
        record = SubmissionRecord(
            identity=identity,
            timestamp=timestamp,
            content_hash=content_hash,
            rate_limit_warning=bool(result and result.has_warnings),
            entropy_discrepancy=bool(result and result.entropy_discrepancy),
        )
        self._history.append(record)
        self._mirror.submit(identity, "append_submission", lambda s: s.append_submission(record))
        if result is None or result.allowed:
            self._reputation.apply(identity, ReputationEvent.PROOF_SUCCESS)
        logger.debug("submission_recorded", identity=short_identity(identity))
        return record

    async def get_submission_stats(self, identity: str) -> SubmissionStats:
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._history.stats(identity, self._clock())

    # ── reputation ──

    async def get_reputation(self, identity: str) -> ReputationRecord:
        """Current (decayed) reputation; a neutral record for unknown identities."""
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._reputation.get(identity)

    async def update_reputation(
        self, identity: str, event: ReputationEvent | str
    ) -> ReputationRecord:
        """Apply *event* to *identity* using decay-then-adjust."""
        event = ReputationEvent(event)
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._reputation.apply(identity, event)

    async def entropy_warning(self, identity: str, result: RateLimitResult) -> str | None:
        """One-line audit warning for a result that flagged an entropy discrepancy."""
        if not result.entropy_discrepancy:
            return None
        record = await self.get_reputation(identity)
        return (
            f"ENTROPY_DISCREPANCY: DID {identity[:20]}... rate={result.current_rate}/min, "
            f"reputation={record.score:.1f}, tier={record.tier.value}"
        )

    # ── anomalies ──

    async def log_anomaly(self, identity: str, description: str) -> AnomalyLogEntry:
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._anomaly_log.log(identity, description)

    async def get_anomaly_log(self, identity: str) -> list[str]:
        """Anomaly entries for *identity* in stored line form, oldest first."""
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._anomaly_log.lines(identity)

    async def has_recent_anomalies(self, identity: str, hours: float = 24) -> bool:
        async with self._locks.hold(identity):
            await self._ensure_hydrated(identity)
            return self._anomaly_log.has_recent(identity, hours)

    # ── lifecycle ──

    async def flush(self) -> None:
        """Wait for all queued durable writes to finish."""
        await self._mirror.flush()
