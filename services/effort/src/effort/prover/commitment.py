"""
Local commitment-based prover.

Produces proofs in Groth16 layout without a real circuit: the proof
points are derived from a hash commitment over the threshold flags, a
hash of the scaled metric values, and the thresholds themselves. The
public signals reveal only the commitment, the five flags, and a hash of
the thresholds. Verification trusts the generator's flags; this is a
stand-in for an actual zero-knowledge circuit.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from hg_common.models import (
    Groth16Proof,
    HumanThresholds,
    ProcessMetrics,
    ZKProof,
    ZKProofMetadata,
    ZKProofResult,
)
from hg_common.utils import canonical_json, round_half_up, sha256_hex, to_iso, utc_now

from effort.prover.base import CIRCUIT_NAME, Prover

logger = structlog.get_logger()

_SCALE = 1000
_SIGNAL_COUNT = 7


def scaled_thresholds(thresholds: HumanThresholds) -> dict[str, Any]:
    """Thresholds as circuit-friendly integers where they are fractions."""
    return {
        "min_duration": thresholds.min_duration,
        "min_entropy_scaled": round_half_up(thresholds.min_entropy * _SCALE),
        "min_coherence_scaled": round_half_up(thresholds.min_temporal_coherence * _SCALE),
        "max_input_rate": thresholds.max_input_rate,
        "min_event_interval": thresholds.min_event_interval,
    }


def thresholds_hash(thresholds: HumanThresholds) -> str:
    return sha256_hex(canonical_json(scaled_thresholds(thresholds)))


def _point(commitment: str, label: str) -> str:
    return sha256_hex(commitment + label, prefixed=True)


def _proof_points(commitment: str) -> Groth16Proof:
    return Groth16Proof(
        pi_a=[_point(commitment, "a0"), _point(commitment, "a1")],
        pi_b=[
            [_point(commitment, "b0"), _point(commitment, "b1")],
            [_point(commitment, "b2"), _point(commitment, "b3")],
        ],
        pi_c=[_point(commitment, "c0"), _point(commitment, "c1")],
    )


class CommitmentProver(Prover):
    """In-process prover used when no remote prover is configured.

    Args:
        clock: Returns the current UTC time for proof metadata.
    """

    name: str = "commitment"

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    async def generate_proof(
        self, metrics: ProcessMetrics, thresholds: HumanThresholds
    ) -> ZKProofResult:
        limits = scaled_thresholds(thresholds)
        entropy_scaled = round_half_up(metrics.entropy * _SCALE)
        coherence_scaled = round_half_up(metrics.temporal_coherence * _SCALE)
        flags = {
            "duration_met": int(metrics.duration >= limits["min_duration"]),
            "entropy_met": int(entropy_scaled >= limits["min_entropy_scaled"]),
            "coherence_met": int(coherence_scaled >= limits["min_coherence_scaled"]),
            "rate_met": int(metrics.input_rate <= limits["max_input_rate"]),
            "interval_met": int(metrics.min_interval >= limits["min_event_interval"]),
        }
        metrics_hash = sha256_hex(
            canonical_json(
                {
                    "duration": metrics.duration,
                    "entropy": entropy_scaled,
                    "coherence": coherence_scaled,
                    "input_events": metrics.input_event_count,
                    "min_interval": metrics.min_interval,
                }
            )
        )
        commitment = sha256_hex(
            canonical_json({**flags, "metrics_hash": metrics_hash, "thresholds": limits})
        )
        proof = ZKProof(
            proof=_proof_points(commitment),
            public_signals=[
                commitment,
                *(str(v) for v in flags.values()),
                thresholds_hash(thresholds),
            ],
        )
        return ZKProofResult(
            proof=proof,
            valid=True,
            metadata=ZKProofMetadata(circuit=CIRCUIT_NAME, timestamp=to_iso(self._clock())),
        )

    async def verify_proof(self, proof: ZKProof, thresholds: HumanThresholds) -> bool:
        """Accept *proof* only if it is well formed, bound to *thresholds*, and all flags are set."""
        signals = proof.public_signals
        if len(signals) != _SIGNAL_COUNT:
            logger.debug("proof_rejected", prover=self.name, reason="signal_count")
            return False
        commitment, *flags, bound_thresholds = signals
        if any(flag != "1" for flag in flags):
            return False
        if bound_thresholds != thresholds_hash(thresholds):
            logger.debug("proof_rejected", prover=self.name, reason="thresholds_mismatch")
            return False
        if proof.proof != _proof_points(commitment):
            logger.debug("proof_rejected", prover=self.name, reason="proof_points")
            return False
        return True
