"""
Tests for the write-behind persistence mirror.

Validates per-identity write ordering, timeout and failure degradation
(logged and counted, never raised), and fallible hydration reads.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from prometheus_client import REGISTRY

from hg_common.errors import PersistenceError

from trust.persistence import PersistenceMirror


def _failures(op: str) -> float:
    return REGISTRY.get_sample_value("humangate_persistence_failures_total", {"op": op}) or 0.0


# ── writes ──


class TestSubmit:

    async def test_no_storage_is_a_no_op(self) -> None:
        mirror = PersistenceMirror(None)
        call = AsyncMock()
        mirror.submit("did:a", "put_reputation", call)
        await mirror.flush()
        call.assert_not_called()
        assert mirror.enabled is False

    async def test_writes_for_one_identity_run_in_order(self) -> None:
        storage = MagicMock()
        mirror = PersistenceMirror(storage)
        seen: list[int] = []

        async def slow(s) -> None:
            await asyncio.sleep(0.02)
            seen.append(1)

        async def fast(s) -> None:
            seen.append(2)

        mirror.submit("did:a", "put_reputation", slow)
        mirror.submit("did:a", "put_reputation", fast)
        await mirror.flush()
        assert seen == [1, 2]
        assert mirror.pending == 0

    async def test_failure_is_logged_not_raised(self) -> None:
        storage = MagicMock()
        storage.put_reputation = AsyncMock(side_effect=ConnectionError("redis down"))
        mirror = PersistenceMirror(storage)
        before = _failures("put_reputation")
        mirror.submit("did:a", "put_reputation", lambda s: s.put_reputation(None))
        await mirror.flush()
        assert _failures("put_reputation") == before + 1

    async def test_failed_write_does_not_block_next(self) -> None:
        storage = MagicMock()
        storage.append_anomaly = AsyncMock(side_effect=[ConnectionError("down"), None])
        mirror = PersistenceMirror(storage)
        mirror.submit("did:a", "append_anomaly", lambda s: s.append_anomaly("did:a", "one"))
        mirror.submit("did:a", "append_anomaly", lambda s: s.append_anomaly("did:a", "two"))
        await mirror.flush()
        assert storage.append_anomaly.await_count == 2

    async def test_slow_write_times_out(self) -> None:
        storage = MagicMock()
        mirror = PersistenceMirror(storage, timeout_s=0.01)
        before = _failures("append_submission")

        async def hang(s) -> None:
            await asyncio.sleep(1)

        mirror.submit("did:a", "append_submission", hang)
        await mirror.flush()
        assert _failures("append_submission") == before + 1


# ── reads ──


class TestRead:

    async def test_read_returns_value(self) -> None:
        storage = MagicMock()
        storage.list_identities = AsyncMock(return_value=["did:a"])
        mirror = PersistenceMirror(storage)
        assert await mirror.read("list_identities", lambda s: s.list_identities(), []) == ["did:a"]

    async def test_read_failure_returns_default(self) -> None:
        storage = MagicMock()
        storage.get_submissions = AsyncMock(side_effect=OSError("refused"))
        mirror = PersistenceMirror(storage)
        result = await mirror.read(
            "get_submissions", lambda s: s.get_submissions("did:a"), [], identity="did:a"
        )
        assert result == []

    async def test_read_without_storage_returns_default(self) -> None:
        assert await PersistenceMirror(None).read("get_reputation", AsyncMock(), None) is None

    async def test_fetch_failure_is_counted_and_raised(self) -> None:
        storage = MagicMock()
        storage.get_reputation = AsyncMock(side_effect=ConnectionError("reset"))
        mirror = PersistenceMirror(storage)
        before = _failures("get_reputation")
        with pytest.raises(PersistenceError):
            await mirror.fetch("get_reputation", lambda s: s.get_reputation("did:a"), identity="did:a")
        assert _failures("get_reputation") == before + 1
