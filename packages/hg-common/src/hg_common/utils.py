"""
Shared utility functions for HumanGate.

Timestamp formatting and parsing, canonical JSON, hashing, and the
half-up rounding used when coarsening metrics before they are hashed.
"""

from __future__ import annotations

import hashlib
import json
import math
from datetime import datetime, timedelta, timezone
from typing import Any

HEX_PREFIX = "0x"

_ONE_US = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format *value* as fixed-width ISO-8601 UTC with millisecond precision.

    Every string produced here has the shape ``YYYY-MM-DDTHH:MM:SS.mmmZ``,
    so lexicographic order equals chronological order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: datetime | str) -> datetime:
    """Return an aware UTC datetime from a datetime or an ISO-8601 string.

    Naive values are taken to be UTC.

    Raises:
        ValueError: If *value* is a string that is not ISO-8601.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_ms(earlier: datetime, later: datetime) -> float:
    """Milliseconds from *earlier* to *later*, exact to the microsecond."""
    return ((later - earlier) // _ONE_US) / 1000


def elapsed_days(earlier: datetime, later: datetime) -> float:
    """Fractional days from *earlier* to *later* (negative if reversed)."""
    return (later - earlier) / timedelta(days=1)


def canonical_json(data: dict[str, Any]) -> str:
    """Serialise *data* with sorted keys and no insignificant whitespace."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def sha256_hex(payload: str | bytes, *, prefixed: bool = False) -> str:
    """Lowercase SHA-256 hex digest of *payload*, optionally ``0x``-prefixed."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    digest = hashlib.sha256(payload).hexdigest()
    return HEX_PREFIX + digest if prefixed else digest


def strip_hex_prefix(value: str) -> str:
    """Return *value* lower-cased without a leading ``0x``."""
    value = value.lower()
    return value[len(HEX_PREFIX):] if value.startswith(HEX_PREFIX) else value


def round_half_up(value: float, places: int = 0) -> float | int:
    """Round half away from negative infinity, as ``Math.round`` does.

    Python's ``round`` uses banker's rounding, which would make the digest
    depend on the parity of the neighbouring digit.

    Returns:
        An ``int`` when *places* is 0, otherwise a ``float``.
    """
    if places == 0:
        return math.floor(value + 0.5)
    scale = 10**places
    return math.floor(value * scale + 0.5) / scale
