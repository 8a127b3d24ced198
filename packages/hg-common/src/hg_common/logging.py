"""
Structured logging setup for HumanGate.

Configures structlog for JSON-formatted structured logging across both
services. Every log line includes timestamp, level, service name, and
event. Per-identity context is bound at processing time, always through
:func:`short_identity` so full identifiers are never written out.
"""

from __future__ import annotations

import logging

import structlog

from hg_common.config import get_settings

_IDENTITY_PREFIX_LEN = 20


def configure_logging(service_name: str | None = None, level: str | None = None) -> None:
    """Install the JSON structlog pipeline.

    Safe to call more than once; the last call wins.

    Args:
        service_name: Bound to every event as ``service``. Defaults to
            ``HG_SERVICE_NAME``.
        level: Minimum level name (``"DEBUG"``, ``"INFO"``, ...). Defaults
            to ``HG_LOG_LEVEL``.
    """
    if service_name is None or level is None:
        settings = get_settings()
        service_name = service_name or settings.service_name
        level = level or settings.log_level
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)


def short_identity(identity: str) -> str:
    """Truncate an identity for log output (first 20 chars + ``...``)."""
    if len(identity) <= _IDENTITY_PREFIX_LEN:
        return identity
    return f"{identity[:_IDENTITY_PREFIX_LEN]}..."
