"""
Process-scoped in-memory trust state.

One ``TrustState`` lives for the lifetime of a node process and is
passed by reference into every trust component. It is the authoritative
copy; the durable store only mirrors it.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from hg_common.models import AnomalyLogEntry, ReputationEvent, ReputationRecord, SubmissionRecord


@dataclass
class TrustState:
    """Per-identity maps of submissions, reputation, and anomalies.

    Attributes:
        histories: Submissions younger than 24 h, oldest first.
        reputations: Latest reputation snapshot per identity.
        anomalies: Bounded anomaly log per identity, oldest first.
        hydrated: Identities already loaded from the durable store.
        deferred: Reputation events applied to identities whose stored
            record could not be read yet, in order. Their reputation is
            not written back until a read succeeds.
    """

    histories: dict[str, list[SubmissionRecord]] = field(default_factory=dict)
    reputations: dict[str, ReputationRecord] = field(default_factory=dict)
    anomalies: dict[str, deque[AnomalyLogEntry]] = field(default_factory=dict)
    hydrated: set[str] = field(default_factory=set)
    deferred: dict[str, list[ReputationEvent]] = field(default_factory=dict)

    def identities(self) -> set[str]:
        """Every identity with any in-memory state."""
        return set(self.histories) | set(self.reputations) | set(self.anomalies)
