"""
In-memory trust storage for HumanGate.

Dictionary-backed :class:`TrustStorage` used by unit tests and local
development. Nothing survives the process.
"""

from __future__ import annotations

from datetime import timedelta

from hg_common.models import ReputationRecord, SubmissionRecord
from hg_common.storage.base import TrustStorage

_HISTORY_RETENTION = timedelta(hours=24)


class InMemoryTrustStorage(TrustStorage):
    """Keeps every collection in plain dictionaries keyed by identity."""

    def __init__(self) -> None:
        self.reputations: dict[str, ReputationRecord] = {}
        self.submissions: dict[str, list[SubmissionRecord]] = {}
        self.anomalies: dict[str, list[str]] = {}

    async def get_reputation(self, identity: str) -> ReputationRecord | None:
        return self.reputations.get(identity)

    async def put_reputation(self, record: ReputationRecord) -> None:
        self.reputations[record.identity] = record

    async def get_submissions(self, identity: str) -> list[SubmissionRecord]:
        return list(self.submissions.get(identity, []))

    async def append_submission(self, record: SubmissionRecord) -> None:
        cutoff = record.timestamp - _HISTORY_RETENTION
        kept = [r for r in self.submissions.get(record.identity, []) if r.timestamp >= cutoff]
        kept.append(record)
        self.submissions[record.identity] = kept

    async def get_anomalies(self, identity: str) -> list[str]:
        return list(self.anomalies.get(identity, []))

    async def append_anomaly(self, identity: str, line: str) -> None:
        self.anomalies.setdefault(identity, []).append(line)

    async def list_identities(self) -> list[str]:
        known = set(self.reputations) | set(self.submissions) | set(self.anomalies)
        return sorted(known)
