"""
Interval statistics for authoring sessions.

Pure functions over the gaps between consecutive input events. Only the
aggregate results leave this module; the intervals themselves are never
stored or logged.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from datetime import datetime
from typing import NamedTuple

from hg_common.utils import elapsed_ms

BIN_WIDTH_MS = 100.0

COHERENT_CV_LOW = 0.3
COHERENT_CV_HIGH = 0.7
COHERENCE_FALLOFF = 0.3


class TimingStats(NamedTuple):
    """Population statistics of the intervals, in milliseconds."""

    variance: float
    average: float
    minimum: float
    maximum: float


def intervals(timestamps: Sequence[datetime]) -> list[float]:
    """Gaps in milliseconds between consecutive *timestamps*."""
    return [elapsed_ms(a, b) for a, b in zip(timestamps, timestamps[1:])]


def _mean_and_variance(values: Sequence[float]) -> tuple[float, float]:
    mean = sum(values) / len(values)
    return mean, sum((v - mean) ** 2 for v in values) / len(values)


def interval_entropy(gaps: Sequence[float]) -> float:
    """Normalised Shannon entropy of *gaps* bucketed into 100 ms bins.

    Entropy is divided by ``log2`` of the number of occupied bins, so a
    single occupied bin scores 0 and an even spread scores 1.
    """
    if not gaps:
        return 0.0
    bins = Counter(math.floor(g / BIN_WIDTH_MS) for g in gaps)
    if len(bins) < 2:
        return 0.0
    total = len(gaps)
    entropy = -sum((n / total) * math.log2(n / total) for n in bins.values())
    return min(1.0, max(0.0, entropy / math.log2(len(bins))))


def temporal_coherence(gaps: Sequence[float]) -> float:
    """Score how human-like the variability of *gaps* is.

    The coefficient of variation scores 1.0 inside ``[0.3, 0.7]``, falls
    linearly to 0 below it (too regular), and falls off over a further
    0.3 above it (too erratic). Fewer than two gaps score 0.
    """
    if len(gaps) < 2:
        return 0.0
    mean, variance = _mean_and_variance(gaps)
    cv = math.sqrt(variance) / mean if mean > 0 else 0.0
    if COHERENT_CV_LOW <= cv <= COHERENT_CV_HIGH:
        return 1.0
    if cv < COHERENT_CV_LOW:
        return cv / COHERENT_CV_LOW
    return max(0.0, 1.0 - (cv - COHERENT_CV_HIGH) / COHERENCE_FALLOFF)


def timing_stats(gaps: Sequence[float]) -> TimingStats:
    if not gaps:
        return TimingStats(0.0, 0.0, 0.0, 0.0)
    mean, variance = _mean_and_variance(gaps)
    return TimingStats(variance=variance, average=mean, minimum=min(gaps), maximum=max(gaps))
