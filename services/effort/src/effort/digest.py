"""
Process digest generation.

A digest is a SHA-256 hash over a canonical, coarsened copy of the
session metrics: entropy and coherence rounded to three decimals,
variance and average interval rounded to whole milliseconds. Rounding is
the only coarsening applied before hashing, so two sessions whose rounded
values agree share a digest.

Alongside it sits a salted commitment to the five threshold flags and,
when the thresholds are met, an optional proof from a prover.
"""

from __future__ import annotations

import secrets
from typing import Any

import structlog

from hg_common.models import HumanThresholds, ProcessDigest, ProcessMetrics
from hg_common.utils import canonical_json, round_half_up, sha256_hex

from effort.prover import DEFAULT_PROOF_TIMEOUT_S, ProofOutcome, Prover, get_default_prover, request_proof
from effort.thresholds import ThresholdChecks, evaluate

logger = structlog.get_logger()


def digest_record(metrics: ProcessMetrics) -> dict[str, Any]:
    """The rounded values that go into the digest hash (metadata excluded)."""
    return {
        "duration": metrics.duration,
        "entropy": round_half_up(metrics.entropy, 3),
        "temporal_coherence": round_half_up(metrics.temporal_coherence, 3),
        "input_events": metrics.input_event_count,
        "timing_variance": round_half_up(metrics.timing_variance),
        "average_interval": round_half_up(metrics.average_interval),
        "min_interval": metrics.min_interval,
        "max_interval": metrics.max_interval,
    }


def digest_hash(metrics: ProcessMetrics) -> str:
    """``0x``-prefixed SHA-256 of the canonical digest record."""
    return sha256_hex(canonical_json(digest_record(metrics)), prefixed=True)


def generate_commitment(checks: ThresholdChecks, nonce: str | None = None) -> str:
    """Salted hash of the five threshold flags.

    A fresh random nonce is drawn unless one is given, so equal flag sets
    do not produce linkable commitments.
    """
    payload = {**checks.flags(), "nonce": nonce if nonce is not None else secrets.token_hex(16)}
    return sha256_hex(canonical_json(payload), prefixed=True)


def generate_compound_hash(content_hash: str, process_digest_hash: str) -> str:
    """Bind a content hash to the process digest that produced it.

    The two inputs are hashed under distinct field names, so swapping them
    changes the result.
    """
    payload = {"content_hash": content_hash, "process_digest": process_digest_hash}
    return sha256_hex(canonical_json(payload), prefixed=True)


async def build_digest(
    metrics: ProcessMetrics,
    thresholds: HumanThresholds | None = None,
    *,
    prover: Prover | None = None,
    with_proof: bool = True,
    proof_timeout_s: float = DEFAULT_PROOF_TIMEOUT_S,
) -> ProcessDigest:
    """Assemble an immutable digest for *metrics*.

    A proof is requested only when every threshold is met and
    *with_proof* is set. A missing or failed proof never prevents the
    digest from being returned; ``proof_status`` records what happened.
    """
    thresholds = thresholds or HumanThresholds()
    checks = evaluate(metrics, thresholds)

    if checks.all_met and with_proof:
        outcome = await request_proof(
            prover or get_default_prover(), metrics, thresholds, timeout_s=proof_timeout_s
        )
    else:
        outcome = ProofOutcome.not_requested()

    result = outcome.result
    digest = ProcessDigest(
        digest_hash=digest_hash(metrics),
        metrics=metrics,
        commitment=generate_commitment(checks),
        zk_proof=result.proof if result else None,
        zk_proof_result=result,
        meets_thresholds=checks.all_met,
        proof_status=outcome.status,
    )
    logger.info(
        "process_digest_generated",
        digest_hash=digest.digest_hash,
        meets_thresholds=digest.meets_thresholds,
        proof_status=digest.proof_status.value,
    )
    return digest
