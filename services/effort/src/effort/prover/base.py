"""
Abstract prover interface and the fallible proof request.

A prover turns a metrics snapshot and a set of thresholds into a threshold
proof, and later checks such a proof without seeing the metrics. Provers
may be slow or unavailable; ``request_proof`` bounds the call with a
timeout and reports the outcome as a value instead of raising.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

import structlog
from pydantic import BaseModel

from hg_common.errors import ProverError
from hg_common.metrics import PROOF_REQUESTS
from hg_common.models import (
    HumanThresholds,
    ProcessMetrics,
    ProofStatus,
    ZKProof,
    ZKProofResult,
)

logger = structlog.get_logger()

CIRCUIT_NAME = "process-threshold-verification"
DEFAULT_PROOF_TIMEOUT_S = 5.0


class Prover(ABC):
    """Base class every threshold prover must implement.

    Attributes:
        name: Short identifier used in logs.
    """

    name: str = "base"

    @abstractmethod
    async def generate_proof(
        self, metrics: ProcessMetrics, thresholds: HumanThresholds
    ) -> ZKProofResult:
        """Produce a proof that *metrics* satisfy *thresholds*.

        Raises:
            ProverError: If no proof could be produced.
        """

    @abstractmethod
    async def verify_proof(self, proof: ZKProof, thresholds: HumanThresholds) -> bool:
        """Check *proof* against *thresholds* without access to the metrics.

        Raises:
            ProverError: If the proof could not be checked at all.
        """

    async def close(self) -> None:
        """Release any resources held by the prover (override if needed)."""


class ProofOutcome(BaseModel):
    """Result of asking a prover for a proof.

    ``result`` is set only when ``status`` is ``attached``; ``reason``
    explains an ``unavailable`` outcome.
    """

    model_config = {"frozen": True}

    status: ProofStatus
    result: ZKProofResult | None = None
    reason: str | None = None

    @classmethod
    def not_requested(cls) -> ProofOutcome:
        PROOF_REQUESTS.labels(status=ProofStatus.NOT_REQUESTED.value).inc()
        return cls(status=ProofStatus.NOT_REQUESTED)


async def request_proof(
    prover: Prover,
    metrics: ProcessMetrics,
    thresholds: HumanThresholds,
    *,
    timeout_s: float = DEFAULT_PROOF_TIMEOUT_S,
) -> ProofOutcome:
    """Ask *prover* for a proof, bounded by *timeout_s*.

    A timeout cancels the prover call. Failures and proofs the prover
    itself marks invalid yield an ``unavailable`` outcome.
    """
    try:
        result = await asyncio.wait_for(
            prover.generate_proof(metrics, thresholds), timeout=timeout_s
        )
    except asyncio.TimeoutError:
        reason = f"prover timed out after {timeout_s}s"
    except ProverError as exc:
        reason = str(exc) or "prover failed"
    except Exception as exc:
        reason = type(exc).__name__
    else:
        if result.valid:
            PROOF_REQUESTS.labels(status=ProofStatus.ATTACHED.value).inc()
            logger.info("proof_attached", prover=prover.name, circuit=result.metadata.circuit)
            return ProofOutcome(status=ProofStatus.ATTACHED, result=result)
        reason = "prover returned an invalid proof"

    PROOF_REQUESTS.labels(status=ProofStatus.UNAVAILABLE.value).inc()
    logger.warning("proof_unavailable", prover=prover.name, reason=reason)
    return ProofOutcome(status=ProofStatus.UNAVAILABLE, reason=reason)
