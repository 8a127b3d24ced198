"""
Redis client wrapper for HumanGate.

Provides an async Redis client for the durable trust store: JSON
key–value access, pipelines for multi-command writes, and a health
probe. Handles connection pooling and reconnection transparently.
"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis

from hg_common.config import get_settings


class RedisClient:
    """Async Redis wrapper with JSON get/set and pipeline helpers.

    Args:
        url: Redis connection URL.  Falls back to ``Settings.redis_url``.
    """

    def __init__(self, url: str | None = None) -> None:
        self._url = url or get_settings().redis_url
        self._redis: aioredis.Redis | None = None

    # ── lifecycle ──

    async def connect(self) -> None:
        """Establish the Redis connection (idempotent)."""
        if self._redis is None:
            self._redis = aioredis.from_url(
                self._url,
                decode_responses=True,
            )

    async def close(self) -> None:
        """Close the Redis connection, if open."""
        if self._redis is not None:
            await self._redis.close()
            self._redis = None

    @property
    def redis(self) -> aioredis.Redis:
        """Return the underlying ``aioredis.Redis`` instance.

        Raises:
            RuntimeError: If ``connect()`` has not been called.
        """
        if self._redis is None:
            raise RuntimeError("RedisClient is not connected. Call connect() first.")
        return self._redis

    # ── key–value helpers ──

    async def get_json(self, key: str) -> Any | None:
        """Return the JSON value stored at *key*, or ``None`` if absent."""
        raw = await self.redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: dict[str, Any]) -> None:
        """Store *value* as JSON at *key*."""
        await self.redis.set(key, json.dumps(value))

    def pipeline(self, transaction: bool = True) -> Any:
        """Return a command pipeline (``MULTI``/``EXEC`` when *transaction*)."""
        return self.redis.pipeline(transaction=transaction)

    # ── health check ──

    async def health_check(self) -> bool:
        """Verify connectivity by issuing a ``PING``.

        Returns:
            ``True`` if Redis responds, ``False`` otherwise.
        """
        try:
            return bool(await self.redis.ping())
        except Exception:  # noqa: BLE001
            return False
