"""
HumanGate effort service.

Measures human-effort characteristics of an authoring session (timing
entropy, temporal coherence), commits to them in a privacy-preserving
process digest, and verifies such digests directly or through a
threshold proof.
"""

from effort.digest import generate_compound_hash
from effort.session import ProcessSession, create_process_session
from effort.verifier import verify_digest, verify_digest_with_zk

__all__ = [
    "ProcessSession",
    "create_process_session",
    "generate_compound_hash",
    "verify_digest",
    "verify_digest_with_zk",
]
