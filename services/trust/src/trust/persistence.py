"""
Write-behind mirror from in-memory trust state to the durable store.

In-memory state is authoritative; the durable store is a best-effort
copy. Writes are queued as background tasks, ordered per identity so a
later reputation snapshot never lands before an earlier one, and bounded
by a timeout. A failed or slow write is logged and counted but never
rolls back or blocks the in-memory update that caused it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from hg_common.errors import PersistenceError
from hg_common.logging import short_identity
from hg_common.metrics import PERSISTENCE_FAILURES
from hg_common.storage import TrustStorage

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_TIMEOUT_S = 2.0

StorageCall = Callable[[TrustStorage], Awaitable[T]]


class PersistenceMirror:
    """Queue durable writes and perform fallible hydration reads.

    Args:
        storage: The durable store, or ``None`` to run purely in memory.
        timeout_s: Upper bound on each individual store call.
    """

    def __init__(self, storage: TrustStorage | None, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self._storage = storage
        self._timeout = timeout_s
        self._tails: dict[str, asyncio.Task[None]] = {}

    @property
    def enabled(self) -> bool:
        """``True`` when a durable store is attached."""
        return self._storage is not None

    @property
    def pending(self) -> int:
        """Identities with queued or running writes."""
        return len(self._tails)

    # ── store calls ──

    async def _call(self, op: str, call: StorageCall[T]) -> T:
        storage = self._storage
        if storage is None:
            raise PersistenceError(op, "no storage attached")
        try:
            return await asyncio.wait_for(call(storage), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise PersistenceError(op, f"timed out after {self._timeout}s") from exc
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(op, str(exc) or type(exc).__name__) from exc

    def _degraded(self, exc: PersistenceError, identity: str | None = None) -> None:
        PERSISTENCE_FAILURES.labels(op=exc.op).inc()
        logger.warning(
            "persistence_degraded",
            op=exc.op,
            identity=short_identity(identity) if identity else None,
            error=str(exc),
        )

    async def fetch(self, op: str, call: StorageCall[T], *, identity: str | None = None) -> T:
        """Run a read against the store.

        Raises:
            PersistenceError: The read failed or timed out; it has already
                been logged and counted.
        """
        try:
            return await self._call(op, call)
        except PersistenceError as exc:
            self._degraded(exc, identity)
            raise

    async def read(self, op: str, call: StorageCall[T], default: T, *, identity: str | None = None) -> T:
        """Run a read against the store, returning *default* on any failure."""
        if self._storage is None:
            return default
        try:
            return await self.fetch(op, call, identity=identity)
        except PersistenceError:
            return default

    # ── write-behind queue ──

    def submit(self, identity: str, op: str, call: StorageCall[None]) -> None:
        """Queue a write for *identity* behind any earlier write for it.

        Must be called from inside a running event loop.
        """
        if self._storage is None:
            return
        previous = self._tails.get(identity)
        task = asyncio.get_running_loop().create_task(self._write(identity, op, call, previous))
        self._tails[identity] = task
        task.add_done_callback(lambda done: self._forget(identity, done))

    async def _write(
        self,
        identity: str,
        op: str,
        call: StorageCall[None],
        previous: asyncio.Task[None] | None,
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])
        try:
            await self._call(op, call)
        except PersistenceError as exc:
            self._degraded(exc, identity)

    def _forget(self, identity: str, task: asyncio.Task[None]) -> None:
        if self._tails.get(identity) is task:
            del self._tails[identity]

    async def flush(self) -> None:
        """Wait until every queued write has finished (or failed)."""
        while self._tails:
            await asyncio.wait(list(self._tails.values()))
