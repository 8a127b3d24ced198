"""
Trust data models for HumanGate.

Defines the Pydantic models for submission records, reputation records,
rate-limit decisions, and anomaly-log entries exchanged between the
trust service, the durable store, and downstream credential/audit code.
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class Tier(str, enum.Enum):
    """Coarse reputation tier derived from the score."""

    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    GREY = "grey"


class ReputationEvent(str, enum.Enum):
    """Events that move a reputation score."""

    PROOF_SUCCESS = "proof_success"
    REVOCATION = "revocation"
    FAILED_ATTESTATION = "failed_attestation"
    ANOMALY = "anomaly"


class RejectionKind(str, enum.Enum):
    """Why a submission was refused by the rate limiter."""

    FLOOR_VIOLATION = "floor_violation"
    RATE_ANOMALY = "rate_anomaly"
    OUT_OF_ORDER = "out_of_order"
    FUTURE_TIMESTAMP = "future_timestamp"


class SubmissionRecord(BaseModel):
    """One accepted (or attempted) proof submission.

    Retained in memory only while younger than 24 hours.

    Attributes:
        identity: Submitting identity (e.g. a DID).
        timestamp: Caller-supplied submission time (UTC).
        content_hash: Hash of the submitted content.
        rate_limit_warning: The rate limiter attached at least one warning.
        entropy_discrepancy: The per-minute ceiling was exceeded.
    """

    model_config = {"frozen": True}

    identity: str = Field(..., min_length=1, description="Submitting identity.")
    timestamp: datetime = Field(..., description="Submission time (UTC).")
    content_hash: str = Field(..., description="Submitted content hash.")
    rate_limit_warning: bool = Field(default=False, description="A rate warning was attached.")
    entropy_discrepancy: bool = Field(default=False, description="Per-minute ceiling exceeded.")


class ReputationRecord(BaseModel):
    """Bounded, decaying trust score for one identity.

    Records are immutable snapshots; the ledger replaces them wholesale
    on every decay or event.

    Attributes:
        identity: The identity this record belongs to.
        score: Trust score, clamped to the configured range.
        last_updated: When decay was last applied (UTC).
        success_count: Accepted proofs.
        revocation_count: Revoked proofs.
        failed_attestation_count: Failed attestations.
        anomaly_count: Anomaly events.
        tier: Coarse tier derived from ``score``.
        trust_level: ``score / 100``.
    """

    model_config = {"frozen": True}

    identity: str = Field(..., min_length=1, description="Owning identity.")
    score: float = Field(..., description="Trust score.")
    last_updated: datetime = Field(..., description="Last decay/update time (UTC).")
    success_count: int = Field(default=0, ge=0, description="Accepted proofs.")
    revocation_count: int = Field(default=0, ge=0, description="Revocations.")
    failed_attestation_count: int = Field(default=0, ge=0, description="Failed attestations.")
    anomaly_count: int = Field(default=0, ge=0, description="Anomaly events.")
    tier: Tier = Field(default=Tier.GREY, description="Reputation tier.")
    trust_level: float = Field(default=0.5, ge=0.0, le=1.0, description="Score as a fraction.")


class RateLimitResult(BaseModel):
    """Outcome of a rate-limit check.

    ``warnings`` and ``entropy_discrepancy`` are ``None`` rather than empty
    or ``False`` when nothing was flagged; absence means "no warning".
    """

    model_config = {"frozen": True}

    allowed: bool
    reason: str | None = None
    rejection: RejectionKind | None = None
    warnings: list[str] | None = None
    current_rate: int = Field(default=0, ge=0, description="Submissions in the last minute.")
    entropy_discrepancy: bool | None = None

    @property
    def has_warnings(self) -> bool:
        """``True`` when at least one warning is attached."""
        return bool(self.warnings)


class AnomalyLogEntry(BaseModel):
    """A timestamped, human-readable anomaly description.

    The stored form is ``"<timestamp>: <description>"`` where the
    timestamp is fixed-width ISO-8601, so comparing timestamp prefixes as
    strings orders entries chronologically.
    """

    model_config = {"frozen": True}

    timestamp: str = Field(..., min_length=24, max_length=24, description="Fixed-width ISO-8601 UTC.")
    description: str

    def render(self) -> str:
        """Return the stored line form."""
        return f"{self.timestamp}: {self.description}"

    @classmethod
    def parse(cls, line: str) -> AnomalyLogEntry:
        """Rebuild an entry from its stored line form.

        Raises:
            ValueError: If *line* has no ``": "`` separator after the timestamp.
        """
        timestamp, sep, description = line.partition(": ")
        if not sep:
            raise ValueError(f"Malformed anomaly entry: {line!r}")
        return cls(timestamp=timestamp, description=description)


class SubmissionStats(BaseModel):
    """Aggregate submission statistics for one identity."""

    model_config = {"frozen": True}

    total_submissions: int = 0
    submissions_last_hour: int = 0
    submissions_last_day: int = 0
    average_interval_ms: float = 0.0
    warnings: int = 0
