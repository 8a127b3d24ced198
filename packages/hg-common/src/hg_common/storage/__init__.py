"""
Durable-store capability interface for HumanGate.

The trust service only ever talks to a :class:`TrustStorage`; the
in-memory implementation serves tests and development, the Redis one
serves deployed nodes.
"""

from hg_common.storage.base import TrustStorage
from hg_common.storage.memory import InMemoryTrustStorage
from hg_common.storage.redis_store import RedisTrustStorage

__all__ = [
    "InMemoryTrustStorage",
    "RedisTrustStorage",
    "TrustStorage",
]
