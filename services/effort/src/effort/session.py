"""
Authoring-session tracker.

A ``ProcessSession`` records the time of each input event while a piece
of work is being created. Metrics and digests are snapshots of the
events so far; the session stays open and may be snapshotted again as it
grows. Only event times are kept, never the kind of input or its content.

A session belongs to a single task and is not safe to share.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from hg_common.models import (
    HumanThresholds,
    ProcessDigest,
    ProcessMetadata,
    ProcessMetrics,
)
from hg_common.utils import elapsed_ms, utc_now

from effort import stats
from effort.digest import build_digest
from effort.prover import DEFAULT_PROOF_TIMEOUT_S, Prover
from effort.thresholds import meets_thresholds


class ProcessSession:
    """Accumulates input events for one authoring session.

    Args:
        thresholds: Thresholds to evaluate against (defaults if omitted).
        metadata: Optional coarse description of the environment.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        thresholds: HumanThresholds | None = None,
        metadata: ProcessMetadata | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._clock = clock
        self._thresholds = thresholds or HumanThresholds()
        self._metadata = metadata
        self._started_at = clock()
        self._events: list[datetime] = []

    @property
    def thresholds(self) -> HumanThresholds:
        return self._thresholds

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def event_count(self) -> int:
        return len(self._events)

    def record_input(self, kind: str | None = None) -> None:
        """Record that an input event (keystroke, click, ...) happened now.

        *kind* is accepted for caller convenience and discarded.
        """
        self._events.append(self._clock())

    def generate_metrics(self) -> ProcessMetrics:
        """Snapshot the session's statistics as of now."""
        ended_at = self._clock()
        gaps = stats.intervals(self._events)
        timing = stats.timing_stats(gaps)
        return ProcessMetrics(
            session_start=self._started_at,
            session_end=ended_at,
            duration=max(0.0, elapsed_ms(self._started_at, ended_at)),
            entropy=stats.interval_entropy(gaps),
            temporal_coherence=stats.temporal_coherence(gaps),
            input_event_count=len(self._events),
            timing_variance=timing.variance,
            average_interval=timing.average,
            min_interval=timing.minimum,
            max_interval=timing.maximum,
            metadata=self._metadata,
        )

    def meets_thresholds(self, metrics: ProcessMetrics | None = None) -> bool:
        return meets_thresholds(metrics or self.generate_metrics(), self._thresholds)

    async def generate_digest(
        self,
        prover: Prover | None = None,
        *,
        with_proof: bool = True,
        proof_timeout_s: float = DEFAULT_PROOF_TIMEOUT_S,
    ) -> ProcessDigest:
        """Snapshot metrics and build a digest, requesting a proof if thresholds are met."""
        return await build_digest(
            self.generate_metrics(),
            self._thresholds,
            prover=prover,
            with_proof=with_proof,
            proof_timeout_s=proof_timeout_s,
        )


def create_process_session(
    metadata: ProcessMetadata | None = None,
    thresholds: HumanThresholds | None = None,
    *,
    clock: Callable[[], datetime] = utc_now,
) -> ProcessSession:
    return ProcessSession(thresholds, metadata, clock=clock)
