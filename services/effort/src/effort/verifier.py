"""
Process digest verification.

``verify_digest`` re-checks the thresholds directly against the metrics
carried in the digest. ``verify_digest_with_zk`` first tries the attached
proof, which needs no access to the metrics; a proof that verifies is
sufficient on its own. A missing, rejected, or uncheckable proof falls
back to the direct check.
"""

from __future__ import annotations

import asyncio

import structlog

from hg_common.errors import ProverError
from hg_common.metrics import ZK_VERIFICATIONS
from hg_common.models import HumanThresholds, ProcessDigest

from effort.prover import DEFAULT_PROOF_TIMEOUT_S, Prover, get_default_prover
from effort.thresholds import meets_thresholds

logger = structlog.get_logger()


def verify_digest(digest: ProcessDigest, thresholds: HumanThresholds | None = None) -> bool:
    """Direct check of all five thresholds against ``digest.metrics``."""
    return meets_thresholds(digest.metrics, thresholds)


async def verify_digest_with_zk(
    digest: ProcessDigest,
    thresholds: HumanThresholds | None = None,
    prover: Prover | None = None,
    *,
    timeout_s: float = DEFAULT_PROOF_TIMEOUT_S,
) -> bool:
    """Verify *digest*, preferring its proof over the disclosed metrics."""
    thresholds = thresholds or HumanThresholds()
    if digest.zk_proof is not None:
        prover = prover or get_default_prover()
        try:
            verified = await asyncio.wait_for(
                prover.verify_proof(digest.zk_proof, thresholds), timeout=timeout_s
            )
        except (ProverError, asyncio.TimeoutError) as exc:
            logger.warning("zk_verification_failed", prover=prover.name, error=str(exc) or "timeout")
            verified = False
        except Exception as exc:
            logger.warning(
                "zk_verification_failed",
                prover=prover.name,
                error=f"{type(exc).__name__}: {exc}",
                exc_info=True,
            )
            verified = False
        if verified:
            ZK_VERIFICATIONS.labels(result="verified").inc()
            return True

    ZK_VERIFICATIONS.labels(result="fallback").inc()
    return verify_digest(digest, thresholds)
