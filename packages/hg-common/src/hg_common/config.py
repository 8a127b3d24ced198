"""
Environment-based configuration management for HumanGate.

Uses pydantic-settings to load configuration values from environment
variables and .env files. Both services build their typed component
configs (rate limits, reputation, human-effort thresholds) from the
``Settings`` instance returned by this module.

All environment variables are prefixed with ``HG_`` to avoid collisions.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from ``HG_``-prefixed environment variables.

    Attributes:
        redis_url: Redis connection URL for the durable trust store.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Name bound to every structured log line.
        rate_max_per_minute: Soft ceiling on submissions per identity per minute.
        rate_max_per_hour: Soft ceiling on submissions per identity per hour.
        rate_max_per_day: Soft ceiling on submissions per identity per day.
        rate_min_interval_ms: Hard floor between two submissions of one identity.
        rate_anomaly_multiplier: Ceiling multiple at which a rate is blocked.
        rate_max_clock_skew_s: Tolerance for submission timestamps ahead of the node clock.
        reputation_initial_score: Score given to a never-seen identity.
        reputation_min_score: Lower clamp for reputation scores.
        reputation_max_score: Upper clamp for reputation scores.
        reputation_success_points: Points added per accepted proof.
        reputation_revocation_penalty: Points removed per revocation.
        reputation_failed_attestation_penalty: Points removed per failed attestation.
        reputation_anomaly_penalty: Points removed per anomaly.
        reputation_decay_rate: Fractional score decay per elapsed day.
        anomaly_log_capacity: Maximum retained anomaly entries per identity.
        human_min_duration_ms: Minimum authoring-session duration.
        human_min_entropy: Minimum normalised interval entropy.
        human_min_temporal_coherence: Minimum temporal-coherence score.
        human_max_input_rate: Maximum input events per second.
        human_min_event_interval_ms: Minimum gap between two input events.
        prover_url: Base URL of a remote prover; empty selects the local prover.
        prover_timeout_s: Upper bound on a single prover call.
        prover_max_attempts: Delivery attempts for remote prover requests.
        persistence_timeout_s: Upper bound on a single durable-store write.
    """

    model_config = SettingsConfigDict(
        env_prefix="HG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Redis ──
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL.",
    )

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Logging level.")
    service_name: str = Field(default="humangate", description="Service name for log lines.")

    # ── Rate limiting ──
    rate_max_per_minute: int = Field(default=10, ge=1, description="Per-minute soft ceiling.")
    rate_max_per_hour: int = Field(default=100, ge=1, description="Per-hour soft ceiling.")
    rate_max_per_day: int = Field(default=1000, ge=1, description="Per-day soft ceiling.")
    rate_min_interval_ms: int = Field(
        default=6000,
        ge=0,
        description="Minimum interval between submissions (ms).",
    )
    rate_anomaly_multiplier: float = Field(
        default=5.0,
        gt=1.0,
        description="Ceiling multiple that blocks a submission.",
    )
    rate_max_clock_skew_s: float = Field(
        default=300.0,
        ge=0.0,
        description="Accepted future skew of submission timestamps (s).",
    )

    # ── Reputation ──
    reputation_initial_score: float = Field(default=50.0, description="Neutral starting score.")
    reputation_min_score: float = Field(default=0.0, description="Lower score clamp.")
    reputation_max_score: float = Field(default=100.0, description="Upper score clamp.")
    reputation_success_points: float = Field(default=1.0, ge=0.0, description="Accepted proof delta.")
    reputation_revocation_penalty: float = Field(default=10.0, ge=0.0, description="Revocation delta.")
    reputation_failed_attestation_penalty: float = Field(
        default=5.0,
        ge=0.0,
        description="Failed attestation delta.",
    )
    reputation_anomaly_penalty: float = Field(default=15.0, ge=0.0, description="Anomaly delta.")
    reputation_decay_rate: float = Field(
        default=0.01,
        ge=0.0,
        lt=1.0,
        description="Exponential decay rate per day.",
    )

    # ── Anomaly log ──
    anomaly_log_capacity: int = Field(default=100, ge=1, description="Retained entries per identity.")

    # ── Human-effort thresholds ──
    human_min_duration_ms: float = Field(default=300_000.0, ge=0.0, description="Minimum session duration.")
    human_min_entropy: float = Field(default=0.5, ge=0.0, le=1.0, description="Minimum entropy.")
    human_min_temporal_coherence: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum temporal coherence.",
    )
    human_max_input_rate: float = Field(default=20.0, gt=0.0, description="Maximum events per second.")
    human_min_event_interval_ms: float = Field(
        default=50.0,
        ge=0.0,
        description="Minimum gap between input events (ms).",
    )

    # ── External collaborators ──
    prover_url: str = Field(default="", description="Remote prover base URL.")
    prover_timeout_s: float = Field(default=5.0, gt=0.0, description="Prover call timeout.")
    prover_max_attempts: int = Field(default=3, ge=1, description="Remote prover attempts.")
    persistence_timeout_s: float = Field(default=2.0, gt=0.0, description="Durable write timeout.")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Returns:
        The global ``Settings`` instance.
    """
    return Settings()
