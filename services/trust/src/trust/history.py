"""
Per-identity submission history for the HumanGate trust service.

Keeps a rolling record of the last 24 hours of proof submissions per
identity and answers sliding-window questions about it (how many
submissions since a cut-off, which one is newest). Entries are pruned on
every append relative to the newest known submission, so pruning does
not depend on the node clock.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from hg_common.models import SubmissionRecord, SubmissionStats
from hg_common.utils import elapsed_ms

from trust.state import TrustState

RETENTION = timedelta(hours=24)
ONE_MINUTE = timedelta(minutes=1)
ONE_HOUR = timedelta(hours=1)


class SubmissionHistory:
    """Sliding-window view over ``TrustState.histories``.

    Args:
        state: The process-scoped trust state.
    """

    def __init__(self, state: TrustState) -> None:
        self._state = state

    # ── queries ──

    def entries(self, identity: str) -> list[SubmissionRecord]:
        """Retained submissions for *identity*, oldest first."""
        return list(self._state.histories.get(identity, []))

    def newest(self, identity: str) -> SubmissionRecord | None:
        """The submission with the latest timestamp, if any."""
        history = self._state.histories.get(identity)
        if not history:
            return None
        return max(history, key=lambda r: r.timestamp)

    def count_since(self, identity: str, cutoff: datetime) -> int:
        """Number of retained submissions at or after *cutoff*."""
        return sum(1 for r in self._state.histories.get(identity, []) if r.timestamp >= cutoff)

    def stats(self, identity: str, now: datetime) -> SubmissionStats:
        """Aggregate counts and the mean gap between consecutive submissions."""
        history = self._state.histories.get(identity, [])
        average = 0.0
        if len(history) > 1:
            gaps = [elapsed_ms(a.timestamp, b.timestamp) for a, b in zip(history, history[1:])]
            average = sum(gaps) / len(gaps)
        return SubmissionStats(
            total_submissions=len(history),
            submissions_last_hour=sum(1 for r in history if r.timestamp >= now - ONE_HOUR),
            submissions_last_day=sum(1 for r in history if r.timestamp >= now - RETENTION),
            average_interval_ms=average,
            warnings=sum(1 for r in history if r.rate_limit_warning or r.entropy_discrepancy),
        )

    # ── mutation ──

    def append(self, record: SubmissionRecord) -> None:
        """Add *record* and drop entries older than the retention window."""
        history = self._state.histories.setdefault(record.identity, [])
        history.append(record)
        self._prune(record.identity)

    def load(self, identity: str, records: Iterable[SubmissionRecord]) -> None:
        """Merge stored *records* into memory (hydration), keeping order and uniqueness."""
        merged = {(r.timestamp, r.content_hash): r for r in records}
        for r in self._state.histories.get(identity, []):
            merged[(r.timestamp, r.content_hash)] = r
        if not merged:
            return
        self._state.histories[identity] = sorted(merged.values(), key=lambda r: r.timestamp)
        self._prune(identity)

    def _prune(self, identity: str) -> None:
        history = self._state.histories[identity]
        newest = max(r.timestamp for r in history)
        cutoff = newest - RETENTION
        self._state.histories[identity] = [r for r in history if r.timestamp >= cutoff]
