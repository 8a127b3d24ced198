"""
Bounded per-identity anomaly log.

Entries are rendered as ``"<fixed-width ISO timestamp>: <description>"``
so that "recent" checks can compare timestamp prefixes as plain strings.
The log keeps the newest ``capacity`` entries per identity; older ones are
evicted first-in first-out.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

import structlog

from hg_common.logging import short_identity
from hg_common.models import AnomalyLogEntry
from hg_common.utils import to_iso, utc_now

from trust.persistence import PersistenceMirror
from trust.state import TrustState

logger = structlog.get_logger()

DEFAULT_CAPACITY = 100


class AnomalyLog:
    """Append-only audit trail of anomalies, capped per identity.

    Args:
        state: The process-scoped trust state.
        mirror: Write-behind mirror used to persist each new entry.
        capacity: Maximum retained entries per identity.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        state: TrustState,
        mirror: PersistenceMirror,
        *,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._state = state
        self._mirror = mirror
        self._capacity = capacity
        self._clock = clock

    @property
    def capacity(self) -> int:
        return self._capacity

    def _log_for(self, identity: str) -> deque[AnomalyLogEntry]:
        log = self._state.anomalies.get(identity)
        if log is None:
            log = self._state.anomalies[identity] = deque(maxlen=self._capacity)
        return log

    def log(self, identity: str, description: str) -> AnomalyLogEntry:
        """Append a timestamped entry and queue it for persistence."""
        entry = AnomalyLogEntry(timestamp=to_iso(self._clock()), description=description)
        self._log_for(identity).append(entry)
        line = entry.render()
        self._mirror.submit(identity, "append_anomaly", lambda s: s.append_anomaly(identity, line))
        logger.warning("anomaly_logged", identity=short_identity(identity), description=description)
        return entry

    def entries(self, identity: str) -> list[AnomalyLogEntry]:
        """Entries for *identity*, oldest first."""
        return list(self._state.anomalies.get(identity, ()))

    def lines(self, identity: str) -> list[str]:
        """Entries for *identity* in their stored line form, oldest first."""
        return [e.render() for e in self._state.anomalies.get(identity, ())]

    def has_recent(self, identity: str, hours: float = 24) -> bool:
        """``True`` if any entry is no older than *hours*."""
        cutoff = to_iso(self._clock() - timedelta(hours=hours))
        return any(e.timestamp >= cutoff for e in self._state.anomalies.get(identity, ()))

    def load(self, identity: str, lines: Iterable[str]) -> None:
        """Restore stored *lines* ahead of any entries already in memory.

        Malformed lines, and lines already held in memory, are skipped.
        """
        current = self._state.anomalies.get(identity, ())
        seen = {entry.render() for entry in current}
        restored: list[AnomalyLogEntry] = []
        for line in lines:
            try:
                entry = AnomalyLogEntry.parse(line)
            except ValueError:
                logger.warning("anomaly_line_skipped", identity=short_identity(identity))
                continue
            if entry.render() not in seen:
                restored.append(entry)
        if not restored:
            return
        self._state.anomalies[identity] = deque([*restored, *current], maxlen=self._capacity)
