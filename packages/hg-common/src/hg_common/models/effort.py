"""
Human-effort data models for HumanGate.

Defines the Pydantic models for human-effort thresholds, the metrics
snapshot of an authoring session, threshold proofs returned by a prover,
and the immutable process digest handed to the submission pipeline.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from hg_common.config import Settings


class HumanThresholds(BaseModel):
    """Numeric thresholds a session must meet to count as human effort.

    Attributes:
        min_duration: Minimum session duration (ms).
        min_entropy: Minimum normalised interval entropy.
        min_temporal_coherence: Minimum temporal-coherence score.
        max_input_rate: Maximum input events per second.
        min_event_interval: Minimum gap between input events (ms).
    """

    model_config = {"frozen": True}

    min_duration: float = Field(default=5 * 60 * 1000, ge=0.0)
    min_entropy: float = Field(default=0.5, ge=0.0, le=1.0)
    min_temporal_coherence: float = Field(default=0.3, ge=0.0, le=1.0)
    max_input_rate: float = Field(default=20.0, gt=0.0)
    min_event_interval: float = Field(default=50.0, ge=0.0)

    @classmethod
    def from_settings(cls, settings: Settings) -> HumanThresholds:
        return cls(
            min_duration=settings.human_min_duration_ms,
            min_entropy=settings.human_min_entropy,
            min_temporal_coherence=settings.human_min_temporal_coherence,
            max_input_rate=settings.human_max_input_rate,
            min_event_interval=settings.human_min_event_interval_ms,
        )


class ProcessMetadata(BaseModel):
    """Optional, coarse description of the authoring environment."""

    model_config = {"frozen": True}

    tool: str | None = None
    environment: str | None = None
    ai_assisted: bool | None = None


class ProcessMetrics(BaseModel):
    """Aggregate statistics of one authoring session at one point in time.

    All interval values are in milliseconds.
    """

    model_config = {"frozen": True}

    session_start: datetime
    session_end: datetime
    duration: float = Field(..., ge=0.0, description="Session duration (ms).")
    entropy: float = Field(..., ge=0.0, le=1.0)
    temporal_coherence: float = Field(..., ge=0.0, le=1.0)
    input_event_count: int = Field(..., ge=0)
    timing_variance: float = Field(default=0.0, ge=0.0)
    average_interval: float = Field(default=0.0, ge=0.0)
    min_interval: float = Field(default=0.0, ge=0.0)
    max_interval: float = Field(default=0.0, ge=0.0)
    metadata: ProcessMetadata | None = None

    @property
    def input_rate(self) -> float:
        """Input events per second over the whole session.

        A zero-length session with events is infinitely fast; one without
        events has a rate of zero.
        """
        if self.duration <= 0:
            return float("inf") if self.input_event_count else 0.0
        return self.input_event_count / (self.duration / 1000)


class Groth16Proof(BaseModel):
    """Proof points in Groth16 layout."""

    model_config = {"frozen": True}

    pi_a: list[str]
    pi_b: list[list[str]]
    pi_c: list[str]


class ZKProof(BaseModel):
    """A threshold proof plus the public signals it commits to."""

    model_config = {"frozen": True}

    proof: Groth16Proof
    public_signals: list[str]
    vkey: dict[str, Any] | None = None


class ZKProofMetadata(BaseModel):
    """Provenance of a generated proof."""

    model_config = {"frozen": True}

    circuit: str
    scheme: str = "groth16"
    timestamp: str


class ZKProofResult(BaseModel):
    """What a prover hands back from ``generate_proof``."""

    model_config = {"frozen": True}

    proof: ZKProof
    valid: bool
    metadata: ZKProofMetadata


class ProofStatus(str, enum.Enum):
    """Whether a threshold proof ended up attached to a digest."""

    ATTACHED = "attached"
    NOT_REQUESTED = "not_requested"
    UNAVAILABLE = "unavailable"


class ProcessDigest(BaseModel):
    """Privacy-preserving commitment to one session's behavioral statistics.

    Attributes:
        digest_hash: ``0x``-prefixed SHA-256 of the rounded canonical metrics.
        metrics: The raw snapshot the digest was computed from.
        commitment: ``0x``-prefixed hash of the five threshold flags and a nonce.
        zk_proof: Threshold proof, when one was obtained.
        zk_proof_result: Full prover response, when a proof was obtained.
        meets_thresholds: All five thresholds held for ``metrics``.
        proof_status: Whether a proof was attached, skipped, or unavailable.
    """

    model_config = {"frozen": True}

    digest_hash: str
    metrics: ProcessMetrics
    commitment: str
    zk_proof: ZKProof | None = None
    zk_proof_result: ZKProofResult | None = None
    meets_thresholds: bool
    proof_status: ProofStatus = ProofStatus.NOT_REQUESTED
