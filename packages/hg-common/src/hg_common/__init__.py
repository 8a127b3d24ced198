"""
hg-common: Shared library for HumanGate.

Provides common data models, configuration management, the durable-store
capability interface and its implementations, the Redis client, structured
logging, and Prometheus metrics used by the trust and effort services.
"""

from hg_common.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
