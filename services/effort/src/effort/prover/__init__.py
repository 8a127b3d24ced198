"""
Threshold provers for HumanGate process digests.

``get_default_prover`` returns the process-wide prover: a remote
``HttpProver`` when ``HG_PROVER_URL`` is set, otherwise the local
``CommitmentProver``.
"""

from __future__ import annotations

from functools import lru_cache

from hg_common.config import get_settings

from effort.prover.base import (
    CIRCUIT_NAME,
    DEFAULT_PROOF_TIMEOUT_S,
    ProofOutcome,
    Prover,
    request_proof,
)
from effort.prover.commitment import CommitmentProver
from effort.prover.http_prover import HttpProver
from effort.prover.serialization import compact_proof, deserialize_proof, serialize_proof


@lru_cache(maxsize=1)
def get_default_prover() -> Prover:
    settings = get_settings()
    if settings.prover_url:
        return HttpProver(
            settings.prover_url,
            max_attempts=settings.prover_max_attempts,
            timeout=settings.prover_timeout_s,
        )
    return CommitmentProver()


__all__ = [
    "CIRCUIT_NAME",
    "DEFAULT_PROOF_TIMEOUT_S",
    "CommitmentProver",
    "HttpProver",
    "ProofOutcome",
    "Prover",
    "compact_proof",
    "deserialize_proof",
    "get_default_prover",
    "request_proof",
    "serialize_proof",
]
