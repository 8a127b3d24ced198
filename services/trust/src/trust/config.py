"""
Typed configuration for the trust service.

Each component takes one of these models; ``from_settings`` maps the
flat ``HG_`` environment settings onto them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from hg_common.config import Settings
from hg_common.models import ReputationEvent


class RateLimitConfig(BaseModel):
    """Ceilings, floor, and anomaly multiplier for submission rates."""

    model_config = {"frozen": True}

    max_per_minute: int = Field(default=10, ge=1)
    max_per_hour: int = Field(default=100, ge=1)
    max_per_day: int = Field(default=1000, ge=1)
    min_interval_ms: float = Field(default=6000, ge=0)
    anomaly_multiplier: float = Field(default=5.0, gt=1.0)
    max_clock_skew_s: float = Field(default=300.0, ge=0.0)

    @classmethod
    def from_settings(cls, settings: Settings) -> RateLimitConfig:
        return cls(
            max_per_minute=settings.rate_max_per_minute,
            max_per_hour=settings.rate_max_per_hour,
            max_per_day=settings.rate_max_per_day,
            min_interval_ms=settings.rate_min_interval_ms,
            anomaly_multiplier=settings.rate_anomaly_multiplier,
            max_clock_skew_s=settings.rate_max_clock_skew_s,
        )


class ReputationConfig(BaseModel):
    """Score bounds, per-event deltas, and daily decay rate."""

    model_config = {"frozen": True}

    initial_score: float = 50.0
    min_score: float = 0.0
    max_score: float = 100.0
    success_points: float = Field(default=1.0, ge=0.0)
    revocation_penalty: float = Field(default=10.0, ge=0.0)
    failed_attestation_penalty: float = Field(default=5.0, ge=0.0)
    anomaly_penalty: float = Field(default=15.0, ge=0.0)
    decay_rate: float = Field(default=0.01, ge=0.0, lt=1.0)

    @model_validator(mode="after")
    def _check_bounds(self) -> ReputationConfig:
        if not self.min_score <= self.initial_score <= self.max_score:
            raise ValueError("initial_score must lie within [min_score, max_score]")
        if self.max_score <= 0:
            raise ValueError("max_score must be positive")
        return self

    def delta(self, event: ReputationEvent) -> float:
        """Signed score change for *event*."""
        return {
            ReputationEvent.PROOF_SUCCESS: self.success_points,
            ReputationEvent.REVOCATION: -self.revocation_penalty,
            ReputationEvent.FAILED_ATTESTATION: -self.failed_attestation_penalty,
            ReputationEvent.ANOMALY: -self.anomaly_penalty,
        }[event]

    @classmethod
    def from_settings(cls, settings: Settings) -> ReputationConfig:
        return cls(
            initial_score=settings.reputation_initial_score,
            min_score=settings.reputation_min_score,
            max_score=settings.reputation_max_score,
            success_points=settings.reputation_success_points,
            revocation_penalty=settings.reputation_revocation_penalty,
            failed_attestation_penalty=settings.reputation_failed_attestation_penalty,
            anomaly_penalty=settings.reputation_anomaly_penalty,
            decay_rate=settings.reputation_decay_rate,
        )
