"""
Redis-backed trust storage for HumanGate.

Implementation
--------------
* **Reputation**: one JSON string per identity at ``reputation:{identity}``.
* **Submissions**: Redis sorted sets keyed ``submissions:{identity}``.
  Each record is stored as its JSON with the unix-epoch timestamp as the
  score.  Appending also trims members more than 24 h older than the new
  record and refreshes a safety-net TTL.
* **Anomalies**: Redis lists keyed ``anomalies:{identity}`` holding the
  rendered ``"<timestamp>: <description>"`` lines, trimmed to the
  configured capacity on append.
* **Identities**: the set ``identities`` records every identity written,
  so a node can hydrate its full state on start-up.
"""

from __future__ import annotations

import json

import structlog

from hg_common.messaging.redis_client import RedisClient
from hg_common.models import ReputationRecord, SubmissionRecord
from hg_common.storage.base import TrustStorage

logger = structlog.get_logger()

_HISTORY_RETENTION_S = 24 * 60 * 60
# Key expiry well past the retention window.
_HISTORY_TTL_S = 2 * _HISTORY_RETENTION_S
_DEFAULT_ANOMALY_CAPACITY = 100
_IDENTITIES_KEY = "identities"


class RedisTrustStorage(TrustStorage):
    """Durable trust store on top of :class:`RedisClient`.

    Args:
        client: An **already-connected** ``RedisClient``.
        anomaly_capacity: Maximum anomaly lines retained per identity.
    """

    def __init__(
        self,
        client: RedisClient,
        *,
        anomaly_capacity: int = _DEFAULT_ANOMALY_CAPACITY,
    ) -> None:
        self._client = client
        self.anomaly_capacity = anomaly_capacity

    # ── reputation ──

    async def get_reputation(self, identity: str) -> ReputationRecord | None:
        data = await self._client.get_json(f"reputation:{identity}")
        if data is None:
            return None
        return ReputationRecord.model_validate(data)

    async def put_reputation(self, record: ReputationRecord) -> None:
        pipe = self._client.pipeline()
        pipe.set(f"reputation:{record.identity}", record.model_dump_json())
        pipe.sadd(_IDENTITIES_KEY, record.identity)
        await pipe.execute()

    # ── submissions ──

    async def get_submissions(self, identity: str) -> list[SubmissionRecord]:
        members = await self._client.redis.zrange(f"submissions:{identity}", 0, -1)
        return [SubmissionRecord.model_validate(json.loads(m)) for m in members]

    async def append_submission(self, record: SubmissionRecord) -> None:
        key = f"submissions:{record.identity}"
        score = record.timestamp.timestamp()
        pipe = self._client.pipeline()
        pipe.zadd(key, {record.model_dump_json(): score})
        pipe.zremrangebyscore(key, "-inf", f"({score - _HISTORY_RETENTION_S}")
        pipe.expire(key, _HISTORY_TTL_S)
        pipe.sadd(_IDENTITIES_KEY, record.identity)
        await pipe.execute()

    # ── anomalies ──

    async def get_anomalies(self, identity: str) -> list[str]:
        lines: list[str] = await self._client.redis.lrange(f"anomalies:{identity}", 0, -1)
        return lines

    async def append_anomaly(self, identity: str, line: str) -> None:
        key = f"anomalies:{identity}"
        pipe = self._client.pipeline()
        pipe.rpush(key, line)
        pipe.ltrim(key, -self.anomaly_capacity, -1)
        pipe.sadd(_IDENTITIES_KEY, identity)
        await pipe.execute()

    # ── discovery / health ──

    async def list_identities(self) -> list[str]:
        members = await self._client.redis.smembers(_IDENTITIES_KEY)
        return sorted(members)

    async def health_check(self) -> bool:
        healthy = await self._client.health_check()
        if not healthy:
            logger.warning("trust_storage_unhealthy", backend="redis")
        return healthy
