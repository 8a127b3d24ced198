"""
Shared Pydantic data models for HumanGate.

This package contains the cross-service data models: submission and
reputation records, rate-limit decisions, anomaly-log entries, human-effort
thresholds, process metrics, threshold proofs, and process digests.
"""

from hg_common.models.effort import (
    Groth16Proof,
    HumanThresholds,
    ProcessDigest,
    ProcessMetadata,
    ProcessMetrics,
    ProofStatus,
    ZKProof,
    ZKProofMetadata,
    ZKProofResult,
)
from hg_common.models.trust import (
    AnomalyLogEntry,
    RateLimitResult,
    RejectionKind,
    ReputationEvent,
    ReputationRecord,
    SubmissionRecord,
    SubmissionStats,
    Tier,
)

__all__ = [
    "AnomalyLogEntry",
    "Groth16Proof",
    "HumanThresholds",
    "ProcessDigest",
    "ProcessMetadata",
    "ProcessMetrics",
    "ProofStatus",
    "RateLimitResult",
    "RejectionKind",
    "ReputationEvent",
    "ReputationRecord",
    "SubmissionRecord",
    "SubmissionStats",
    "Tier",
    "ZKProof",
    "ZKProofMetadata",
    "ZKProofResult",
]
