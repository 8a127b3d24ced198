"""
Reputation ledger: bounded, exponentially decaying trust scores.

Scores decay lazily on read (no background timer) by
``(1 - decay_rate) ** days`` since the record was last touched, then
event deltas are applied and clamped. Tier and trust level are pure
functions of the score. Every change replaces the stored snapshot.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from hg_common.logging import short_identity
from hg_common.metrics import REPUTATION_EVENTS
from hg_common.models import ReputationEvent, ReputationRecord, Tier
from hg_common.utils import elapsed_days, utc_now

from trust.anomaly_log import AnomalyLog
from trust.config import ReputationConfig
from trust.persistence import PersistenceMirror
from trust.state import TrustState

logger = structlog.get_logger()

GREEN_CUTOFF = 80.0
BLUE_CUTOFF = 60.0
PURPLE_CUTOFF = 40.0

_COUNTERS = {
    ReputationEvent.PROOF_SUCCESS: "success_count",
    ReputationEvent.REVOCATION: "revocation_count",
    ReputationEvent.FAILED_ATTESTATION: "failed_attestation_count",
    ReputationEvent.ANOMALY: "anomaly_count",
}


def tier_for(score: float) -> Tier:
    """Map a score to its tier using fixed, inclusive lower cutoffs."""
    if score >= GREEN_CUTOFF:
        return Tier.GREEN
    if score >= BLUE_CUTOFF:
        return Tier.BLUE
    if score >= PURPLE_CUTOFF:
        return Tier.PURPLE
    return Tier.GREY


def decay_score(score: float, days: float, rate: float, floor: float = 0.0) -> float:
    """Decay *score* multiplicatively over *days*, never below *floor*.

    Non-positive *days* leave the score unchanged.
    """
    if days <= 0:
        return score
    return max(floor, score * (1 - rate) ** days)


@dataclass(frozen=True)
class ReputationLookup:
    """A reputation record and whether it was just created."""

    record: ReputationRecord
    fresh: bool


class ReputationLedger:
    """Owns reputation records in ``TrustState.reputations``.

    Callers are expected to hold the identity's lock and to have hydrated
    the identity from the durable store first.
    """

    def __init__(
        self,
        state: TrustState,
        anomaly_log: AnomalyLog,
        mirror: PersistenceMirror,
        config: ReputationConfig | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._state = state
        self._anomaly_log = anomaly_log
        self._mirror = mirror
        self._config = config or ReputationConfig()
        self._clock = clock

    @property
    def config(self) -> ReputationConfig:
        return self._config

    def _trust_level(self, score: float) -> float:
        return min(1.0, max(0.0, score / self._config.max_score))

    def _rescored(self, record: ReputationRecord, score: float, now: datetime, **changes: int) -> ReputationRecord:
        return record.model_copy(
            update={
                "score": score,
                "tier": tier_for(score),
                "trust_level": self._trust_level(score),
                "last_updated": now,
                **changes,
            }
        )

    def lookup(self, identity: str) -> ReputationLookup:
        """Return the decayed record for *identity*, creating a neutral one if absent.

        A new record starts at the initial score, tier grey and trust 0.5,
        and is not persisted until an event changes it.
        """
        return self._lookup(identity, self._clock())

    def _lookup(self, identity: str, now: datetime) -> ReputationLookup:
        existing = self._state.reputations.get(identity)
        if existing is None:
            record = ReputationRecord(
                identity=identity,
                score=self._config.initial_score,
                last_updated=now,
            )
            self._state.reputations[identity] = record
            return ReputationLookup(record=record, fresh=True)

        days = elapsed_days(existing.last_updated, now)
        if days <= 0:
            return ReputationLookup(record=existing, fresh=False)
        score = decay_score(existing.score, days, self._config.decay_rate, self._config.min_score)
        record = self._rescored(existing, score, now)
        self._state.reputations[identity] = record
        return ReputationLookup(record=record, fresh=False)

    def get(self, identity: str) -> ReputationRecord:
        return self.lookup(identity).record

    def apply(self, identity: str, event: ReputationEvent) -> ReputationRecord:
        """Decay, apply *event*'s delta, re-derive tier, and persist the record.

        While the identity's stored record is unreadable the event is kept
        in ``TrustState.deferred`` and nothing is written back.
        """
        return self._adjust(identity, event, self._clock())

    def _adjust(
        self, identity: str, event: ReputationEvent, now: datetime, *, audit: bool = True
    ) -> ReputationRecord:
        current = self._lookup(identity, now).record
        cfg = self._config
        score = min(cfg.max_score, max(cfg.min_score, current.score + cfg.delta(event)))
        counter = _COUNTERS[event]
        record = self._rescored(
            current,
            score,
            now,
            **{counter: getattr(current, counter) + 1},
        )
        self._state.reputations[identity] = record

        if audit and event is ReputationEvent.ANOMALY:
            self._anomaly_log.log(identity, "Cryptographic anomaly detected")

        deferred = self._state.deferred.get(identity)
        if deferred is None:
            self._mirror.submit(identity, "put_reputation", lambda s: s.put_reputation(record))
        else:
            deferred.append(event)
        if audit:
            REPUTATION_EVENTS.labels(event=event.value).inc()
        logger.info(
            "reputation_updated",
            identity=short_identity(identity),
            reputation_event=event.value,
            score=round(score, 3),
            tier=record.tier.value,
        )
        return record

    def restore(self, identity: str, stored: ReputationRecord | None) -> None:
        """Adopt the *stored* record after a successful read.

        Events applied while the store was unreadable are replayed on top
        of *stored* and the result is written back. Their anomaly entries
        are already in the log, so replay does not log them again.
        """
        events = self._state.deferred.pop(identity, None)
        if events is None:
            if stored is not None and identity not in self._state.reputations:
                self._state.reputations[identity] = stored
            return
        if stored is None:
            record = self._state.reputations.get(identity)
            if record is not None and events:
                self._mirror.submit(identity, "put_reputation", lambda s: s.put_reputation(record))
            return

        self._state.reputations[identity] = stored
        now = self._clock()
        for event in events:
            self._adjust(identity, event, now, audit=False)
        if events:
            logger.info(
                "reputation_events_replayed",
                identity=short_identity(identity),
                events=len(events),
            )
