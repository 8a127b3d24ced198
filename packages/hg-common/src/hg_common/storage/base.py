"""
Abstract base class for durable trust storage in HumanGate.

Defines the narrow capability interface the trust service needs from a
store: read/write one reputation record, read/append submission history,
and read/append anomaly entries, all partitioned by identity. Pruning and
eviction policy belong to the trust service, not to the store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from hg_common.models import ReputationRecord, SubmissionRecord


class TrustStorage(ABC):
    """Abstract base class that every durable trust store must implement.

    Every method may raise; callers treat the store as a fallible,
    best-effort mirror of their in-memory state.
    """

    @abstractmethod
    async def get_reputation(self, identity: str) -> ReputationRecord | None:
        """Return the stored reputation record for *identity*, if any."""
        ...  # pragma: no cover

    @abstractmethod
    async def put_reputation(self, record: ReputationRecord) -> None:
        """Insert or replace the reputation record of ``record.identity``."""
        ...  # pragma: no cover

    @abstractmethod
    async def get_submissions(self, identity: str) -> list[SubmissionRecord]:
        """Return stored submissions for *identity*, oldest first."""
        ...  # pragma: no cover

    @abstractmethod
    async def append_submission(self, record: SubmissionRecord) -> None:
        """Append one submission record."""
        ...  # pragma: no cover

    @abstractmethod
    async def get_anomalies(self, identity: str) -> list[str]:
        """Return stored anomaly lines for *identity*, oldest first."""
        ...  # pragma: no cover

    @abstractmethod
    async def append_anomaly(self, identity: str, line: str) -> None:
        """Append one rendered anomaly line."""
        ...  # pragma: no cover

    @abstractmethod
    async def list_identities(self) -> list[str]:
        """Return every identity the store holds any state for."""
        ...  # pragma: no cover

    async def health_check(self) -> bool:
        """Return ``True`` if the store is reachable."""
        return True
