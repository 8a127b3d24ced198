"""
Per-identity mutual exclusion for the trust service.

Checking a rate limit, recording a submission, and applying a reputation
event are read-modify-write sequences on one identity's state. They are
serialised per identity with an ``asyncio.Lock`` while different
identities proceed in parallel. Locks are created on demand and dropped
once nobody holds or waits on them.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class IdentityLocks:
    """Registry of one ``asyncio.Lock`` per active identity."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, identity: str) -> AsyncIterator[None]:
        """Hold the lock for *identity* for the duration of the block.

        Not re-entrant: do not call ``hold`` for the same identity from
        inside the block.
        """
        lock = self._locks.get(identity)
        if lock is None:
            lock = self._locks[identity] = asyncio.Lock()
        self._users[identity] = self._users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[identity] -= 1
            if self._users[identity] == 0:
                del self._users[identity]
                del self._locks[identity]

    def is_locked(self, identity: str) -> bool:
        """``True`` while some task holds the lock for *identity*."""
        lock = self._locks.get(identity)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
