"""
Tests for process digest generation.

Validates determinism of the digest hash under rounding, the salted
threshold commitment, proof attachment and degradation, and the
compound content/process hash.
"""

from __future__ import annotations

import asyncio
import re
from unittest.mock import AsyncMock, MagicMock

from hg_common.errors import ProverError
from hg_common.models import ProofStatus

from effort.digest import (
    digest_hash,
    digest_record,
    generate_commitment,
    generate_compound_hash,
)
from effort.thresholds import evaluate

_HEX_HASH = re.compile(r"^0x[0-9a-f]{64}$")

# Both sequences round to average 1525 ms and variance 275625 ms².
_GAPS_A = [1000.0, 2050.0, 1000.0, 2050.0]
_GAPS_B = [1000.0, 2050.0, 1000.0, 2049.999]
# Variance 275362.6875 rounds to a different integer.
_GAPS_C = [1000.0, 2050.0, 1000.0, 2049.0]


# ── digest hash ──


class TestDigestHash:

    def test_format(self, make_session) -> None:
        assert _HEX_HASH.match(digest_hash(make_session(_GAPS_A, total_ms=7000).generate_metrics()))

    def test_rounded_record(self, make_session) -> None:
        record = digest_record(make_session(_GAPS_B, total_ms=7000).generate_metrics())
        assert record["average_interval"] == 1525
        assert record["timing_variance"] == 275625
        assert record["max_interval"] == 2050.0
        assert "metadata" not in record

    def test_equal_after_rounding(self, make_session) -> None:
        a = make_session(_GAPS_A, total_ms=7000).generate_metrics()
        b = make_session(_GAPS_B, total_ms=7000).generate_metrics()
        assert a.timing_variance != b.timing_variance
        assert digest_hash(a) == digest_hash(b)

    def test_crossing_rounding_boundary_changes_hash(self, make_session) -> None:
        a = make_session(_GAPS_A, total_ms=7000).generate_metrics()
        c = make_session(_GAPS_C, total_ms=7000).generate_metrics()
        assert digest_hash(a) != digest_hash(c)


# ── commitment ──


class TestCommitment:

    def test_fixed_nonce_is_deterministic(self, human_session) -> None:
        checks = evaluate(human_session.generate_metrics())
        assert generate_commitment(checks, "ab" * 16) == generate_commitment(checks, "ab" * 16)

    def test_random_nonce_unlinkable(self, human_session) -> None:
        checks = evaluate(human_session.generate_metrics())
        first, second = generate_commitment(checks), generate_commitment(checks)
        assert first != second
        assert _HEX_HASH.match(first)


# ── digest assembly ──


class TestGenerateDigest:

    async def test_proof_attached_when_thresholds_met(self, human_session, prover) -> None:
        digest = await human_session.generate_digest(prover)
        assert digest.meets_thresholds is True
        assert digest.proof_status is ProofStatus.ATTACHED
        assert digest.zk_proof == digest.zk_proof_result.proof
        assert digest.digest_hash == digest_hash(digest.metrics)

    async def test_no_proof_below_thresholds(self, make_session) -> None:
        prover = MagicMock()
        prover.generate_proof = AsyncMock()
        digest = await make_session([500.0] * 19).generate_digest(prover)
        assert digest.meets_thresholds is False
        assert digest.proof_status is ProofStatus.NOT_REQUESTED
        assert digest.zk_proof is None
        prover.generate_proof.assert_not_awaited()

    async def test_proof_can_be_skipped(self, human_session, prover) -> None:
        digest = await human_session.generate_digest(prover, with_proof=False)
        assert digest.meets_thresholds is True
        assert digest.proof_status is ProofStatus.NOT_REQUESTED

    async def test_prover_failure_degrades(self, human_session) -> None:
        prover = MagicMock()
        prover.name = "broken"
        prover.generate_proof = AsyncMock(side_effect=ProverError("down"))
        digest = await human_session.generate_digest(prover)
        assert digest.meets_thresholds is True
        assert digest.proof_status is ProofStatus.UNAVAILABLE
        assert digest.zk_proof is None
        assert _HEX_HASH.match(digest.commitment)

    async def test_unexpected_prover_exception_degrades(self, human_session) -> None:
        prover = MagicMock()
        prover.name = "flaky"
        prover.generate_proof = AsyncMock(side_effect=ConnectionError("reset by peer"))
        digest = await human_session.generate_digest(prover)
        assert digest.meets_thresholds is True
        assert digest.proof_status is ProofStatus.UNAVAILABLE
        assert digest.zk_proof is None

    async def test_slow_prover_times_out(self, human_session) -> None:
        async def _hang(*args):
            await asyncio.sleep(1)

        prover = MagicMock()
        prover.name = "slow"
        prover.generate_proof = _hang
        digest = await human_session.generate_digest(prover, proof_timeout_s=0.01)
        assert digest.proof_status is ProofStatus.UNAVAILABLE

    async def test_default_prover_is_local(self, human_session) -> None:
        digest = await human_session.generate_digest()
        assert digest.proof_status is ProofStatus.ATTACHED
        assert digest.zk_proof_result.metadata.circuit == "process-threshold-verification"

    async def test_digest_hash_stable_across_snapshots(self, human_session, prover) -> None:
        first = await human_session.generate_digest(prover)
        second = await human_session.generate_digest(prover)
        assert first.digest_hash == second.digest_hash
        assert first.commitment != second.commitment


# ── compound hash ──


class TestCompoundHash:

    def test_deterministic(self) -> None:
        assert generate_compound_hash("0xaa", "0xbb") == generate_compound_hash("0xaa", "0xbb")

    def test_not_commutative(self) -> None:
        assert generate_compound_hash("0xaa", "0xbb") != generate_compound_hash("0xbb", "0xaa")

    def test_format(self) -> None:
        assert _HEX_HASH.match(generate_compound_hash("0xaa", "0xbb"))
