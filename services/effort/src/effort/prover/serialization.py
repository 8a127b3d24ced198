"""
Proof serialisation helpers for storage and transport.
"""

from __future__ import annotations

import json

from hg_common.models import ZKProof


def serialize_proof(proof: ZKProof) -> str:
    """Pretty-printed JSON form of *proof*."""
    return proof.model_dump_json(indent=2, exclude_none=True)


def deserialize_proof(data: str | bytes) -> ZKProof:
    """Parse a proof produced by :func:`serialize_proof`.

    Raises:
        pydantic.ValidationError: If *data* is not a valid proof.
    """
    return ZKProof.model_validate_json(data)


def compact_proof(proof: ZKProof) -> str:
    """Single-line JSON with short keys, for storage next to a proof record."""
    compact = {
        "a": proof.proof.pi_a,
        "b": proof.proof.pi_b,
        "c": proof.proof.pi_c,
        "signals": proof.public_signals,
    }
    return json.dumps(compact, separators=(",", ":"))
