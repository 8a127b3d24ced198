"""
Tests for the durable trust storage implementations.

The in-memory store is exercised directly; the Redis store is exercised
against a mocked ``RedisClient`` and pipeline, checking key layout and
the trimming commands issued on append.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from hg_common.models import ReputationRecord, SubmissionRecord, Tier
from hg_common.storage import InMemoryTrustStorage, RedisTrustStorage

_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
_DID = "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"


def _submission(offset: timedelta = timedelta(0), content_hash: str = "0xaa") -> SubmissionRecord:
    return SubmissionRecord(identity=_DID, timestamp=_NOW + offset, content_hash=content_hash)


# ── in-memory ──


class TestInMemoryTrustStorage:

    async def test_reputation_round_trip(self) -> None:
        store = InMemoryTrustStorage()
        record = ReputationRecord(identity=_DID, score=72.0, last_updated=_NOW, tier=Tier.BLUE)
        await store.put_reputation(record)
        assert await store.get_reputation(_DID) == record
        assert await store.get_reputation("did:key:other") is None

    async def test_append_submission_trims_older_than_a_day(self) -> None:
        store = InMemoryTrustStorage()
        await store.append_submission(_submission(timedelta(hours=-30), "0x01"))
        await store.append_submission(_submission(timedelta(hours=-2), "0x02"))
        await store.append_submission(_submission(content_hash="0x03"))
        hashes = [r.content_hash for r in await store.get_submissions(_DID)]
        assert hashes == ["0x02", "0x03"]

    async def test_get_submissions_returns_copy(self) -> None:
        store = InMemoryTrustStorage()
        await store.append_submission(_submission())
        (await store.get_submissions(_DID)).clear()
        assert len(await store.get_submissions(_DID)) == 1

    async def test_anomalies_append_in_order(self) -> None:
        store = InMemoryTrustStorage()
        await store.append_anomaly(_DID, "2026-10-17T12:00:00.000Z: first")
        await store.append_anomaly(_DID, "2026-10-17T12:00:01.000Z: second")
        assert [line.split(": ", 1)[1] for line in await store.get_anomalies(_DID)] == [
            "first",
            "second",
        ]

    async def test_list_identities_spans_collections(self) -> None:
        store = InMemoryTrustStorage()
        await store.append_anomaly("did:b", "x")
        await store.append_submission(_submission())
        assert await store.list_identities() == sorted(["did:b", _DID])

    async def test_health_check(self) -> None:
        assert await InMemoryTrustStorage().health_check() is True


# ── redis ──


@pytest.fixture()
def pipe() -> MagicMock:
    p = MagicMock(name="pipeline")
    p.execute = AsyncMock(return_value=[])
    return p


@pytest.fixture()
def redis_client(pipe: MagicMock) -> MagicMock:
    """A mock ``RedisClient`` whose ``pipeline()`` returns *pipe*."""
    client = MagicMock(name="RedisClient")
    client.pipeline = MagicMock(return_value=pipe)
    client.get_json = AsyncMock(return_value=None)
    client.health_check = AsyncMock(return_value=True)
    client.redis = MagicMock(name="redis")
    client.redis.zrange = AsyncMock(return_value=[])
    client.redis.lrange = AsyncMock(return_value=[])
    client.redis.smembers = AsyncMock(return_value=set())
    return client


class TestRedisTrustStorage:

    async def test_get_reputation_missing(self, redis_client: MagicMock) -> None:
        store = RedisTrustStorage(redis_client)
        assert await store.get_reputation(_DID) is None
        redis_client.get_json.assert_awaited_once_with(f"reputation:{_DID}")

    async def test_get_reputation_decodes(self, redis_client: MagicMock) -> None:
        record = ReputationRecord(identity=_DID, score=61.0, last_updated=_NOW, tier=Tier.BLUE)
        redis_client.get_json = AsyncMock(return_value=json.loads(record.model_dump_json()))
        store = RedisTrustStorage(redis_client)
        assert await store.get_reputation(_DID) == record

    async def test_put_reputation_registers_identity(
        self, redis_client: MagicMock, pipe: MagicMock
    ) -> None:
        store = RedisTrustStorage(redis_client)
        await store.put_reputation(ReputationRecord(identity=_DID, score=50.0, last_updated=_NOW))
        assert pipe.set.call_args[0][0] == f"reputation:{_DID}"
        pipe.sadd.assert_called_once_with("identities", _DID)
        pipe.execute.assert_awaited_once()

    async def test_append_submission_scores_by_timestamp_and_trims(
        self, redis_client: MagicMock, pipe: MagicMock
    ) -> None:
        store = RedisTrustStorage(redis_client)
        record = _submission()
        await store.append_submission(record)

        key, mapping = pipe.zadd.call_args[0]
        assert key == f"submissions:{_DID}"
        assert list(mapping.values()) == [record.timestamp.timestamp()]

        trim_key, low, high = pipe.zremrangebyscore.call_args[0]
        assert trim_key == key
        assert low == "-inf"
        assert high == f"({record.timestamp.timestamp() - 86400}"
        pipe.expire.assert_called_once()

    async def test_get_submissions_decodes_members(self, redis_client: MagicMock) -> None:
        record = _submission()
        redis_client.redis.zrange = AsyncMock(return_value=[record.model_dump_json()])
        store = RedisTrustStorage(redis_client)
        assert await store.get_submissions(_DID) == [record]

    async def test_append_anomaly_trims_to_capacity(
        self, redis_client: MagicMock, pipe: MagicMock
    ) -> None:
        store = RedisTrustStorage(redis_client, anomaly_capacity=100)
        await store.append_anomaly(_DID, "2026-10-17T12:00:00.000Z: burst")
        pipe.rpush.assert_called_once_with(f"anomalies:{_DID}", "2026-10-17T12:00:00.000Z: burst")
        pipe.ltrim.assert_called_once_with(f"anomalies:{_DID}", -100, -1)

    async def test_list_identities_sorted(self, redis_client: MagicMock) -> None:
        redis_client.redis.smembers = AsyncMock(return_value={"did:b", "did:a"})
        store = RedisTrustStorage(redis_client)
        assert await store.list_identities() == ["did:a", "did:b"]

    async def test_health_check_delegates(self, redis_client: MagicMock) -> None:
        redis_client.health_check = AsyncMock(return_value=False)
        store = RedisTrustStorage(redis_client)
        assert await store.health_check() is False
