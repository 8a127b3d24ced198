"""
Human-effort threshold evaluation.

The five checks are evaluated once here and reused by the digest
commitment, the local prover, and direct verification.
"""

from __future__ import annotations

from pydantic import BaseModel

from hg_common.models import HumanThresholds, ProcessMetrics


class ThresholdChecks(BaseModel):
    """Outcome of each threshold check for one metrics snapshot."""

    model_config = {"frozen": True}

    duration_met: bool
    entropy_met: bool
    coherence_met: bool
    rate_met: bool
    interval_met: bool

    @property
    def all_met(self) -> bool:
        return (
            self.duration_met
            and self.entropy_met
            and self.coherence_met
            and self.rate_met
            and self.interval_met
        )

    def flags(self) -> dict[str, int]:
        """The checks as ``0``/``1`` integers keyed by name."""
        return {name: int(value) for name, value in self.model_dump().items()}


def evaluate(metrics: ProcessMetrics, thresholds: HumanThresholds | None = None) -> ThresholdChecks:
    """Run the five threshold checks against *metrics*."""
    t = thresholds or HumanThresholds()
    return ThresholdChecks(
        duration_met=metrics.duration >= t.min_duration,
        entropy_met=metrics.entropy >= t.min_entropy,
        coherence_met=metrics.temporal_coherence >= t.min_temporal_coherence,
        rate_met=metrics.input_rate <= t.max_input_rate,
        interval_met=metrics.min_interval >= t.min_event_interval,
    )


def meets_thresholds(metrics: ProcessMetrics, thresholds: HumanThresholds | None = None) -> bool:
    return evaluate(metrics, thresholds).all_met
