"""
Sliding-window rate limiter for proof submissions.

Counts a candidate submission together with the identity's retained
history over the trailing minute, hour, and day. A hard minimum interval
between consecutive submissions is enforced outright; the per-minute
ceiling only warns until the resulting rate reaches the anomaly
multiplier, at which point the submission is refused and the anomaly is
logged for audit. The hourly and daily ceilings never block.

Decisions are returned as ``RateLimitResult`` values, never raised.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

import structlog

from hg_common.logging import short_identity
from hg_common.metrics import RATE_LIMIT_DECISIONS
from hg_common.models import RateLimitResult, RejectionKind
from hg_common.utils import elapsed_ms, utc_now

from trust.anomaly_log import AnomalyLog
from trust.config import RateLimitConfig
from trust.history import ONE_HOUR, ONE_MINUTE, RETENTION, SubmissionHistory

logger = structlog.get_logger()


class RateLimiter:
    """Decide whether a submission at a given time looks human-paced.

    Args:
        history: Submission history to count against.
        anomaly_log: Receives an entry when a rate anomaly is detected.
        config: Ceilings, floor, and anomaly multiplier.
        clock: Returns the current UTC time (used for the future-skew bound).
    """

    def __init__(
        self,
        history: SubmissionHistory,
        anomaly_log: AnomalyLog,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._history = history
        self._anomaly_log = anomaly_log
        self._config = config or RateLimitConfig()
        self._clock = clock

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def check(self, identity: str, timestamp: datetime) -> RateLimitResult:
        """Evaluate a candidate submission by *identity* at *timestamp*.

        Checks run in order: ordering, clock skew, minimum interval, then
        the per-minute, per-hour and per-day ceilings.
        """
        cfg = self._config
        per_minute = self._history.count_since(identity, timestamp - ONE_MINUTE) + 1
        newest = self._history.newest(identity)

        if newest is not None:
            if timestamp < newest.timestamp:
                return self._reject(
                    identity,
                    RejectionKind.OUT_OF_ORDER,
                    "Submission timestamp precedes the latest recorded submission",
                    per_minute,
                )
            if timestamp - self._clock() > timedelta(seconds=cfg.max_clock_skew_s):
                return self._reject(
                    identity,
                    RejectionKind.FUTURE_TIMESTAMP,
                    f"Submission timestamp is more than {cfg.max_clock_skew_s:g}s in the future",
                    per_minute,
                )
            if elapsed_ms(newest.timestamp, timestamp) < cfg.min_interval_ms:
                return self._reject(
                    identity,
                    RejectionKind.FLOOR_VIOLATION,
                    f"Proofs submitted too quickly. Minimum interval: {cfg.min_interval_ms:g}ms",
                    per_minute,
                )

        warnings: list[str] = []
        discrepancy = False

        if per_minute > cfg.max_per_minute:
            rate = per_minute / cfg.max_per_minute
            if rate >= cfg.anomaly_multiplier:
                self._anomaly_log.log(
                    identity,
                    f"Extreme rate anomaly: {per_minute} proofs/minute ({rate:.1f}x threshold)",
                )
                return self._reject(
                    identity,
                    RejectionKind.RATE_ANOMALY,
                    f"Rate limit exceeded: {per_minute} proofs/minute exceeds human threshold",
                    per_minute,
                    entropy_discrepancy=True,
                )
            warnings.append(f"High submission rate: {per_minute} proofs/minute")
            discrepancy = True

        per_hour = self._history.count_since(identity, timestamp - ONE_HOUR) + 1
        if per_hour > cfg.max_per_hour:
            warnings.append(f"High hourly rate: {per_hour} proofs/hour")

        per_day = self._history.count_since(identity, timestamp - RETENTION) + 1
        if per_day > cfg.max_per_day:
            warnings.append(f"High daily rate: {per_day} proofs/day")

        RATE_LIMIT_DECISIONS.labels(outcome="warned" if warnings else "allowed").inc()
        if warnings:
            logger.info(
                "rate_limit_warned",
                identity=short_identity(identity),
                rate=per_minute,
                warnings=len(warnings),
            )
        return RateLimitResult(
            allowed=True,
            warnings=warnings or None,
            current_rate=per_minute,
            entropy_discrepancy=discrepancy or None,
        )

    def _reject(
        self,
        identity: str,
        kind: RejectionKind,
        reason: str,
        per_minute: int,
        *,
        entropy_discrepancy: bool | None = None,
    ) -> RateLimitResult:
        RATE_LIMIT_DECISIONS.labels(outcome=kind.value).inc()
        logger.info(
            "rate_limit_rejected",
            identity=short_identity(identity),
            rejection=kind.value,
            rate=per_minute,
        )
        return RateLimitResult(
            allowed=False,
            reason=reason,
            rejection=kind,
            current_rate=per_minute,
            entropy_discrepancy=entropy_discrepancy,
        )
