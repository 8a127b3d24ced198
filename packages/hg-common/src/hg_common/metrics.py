"""
Prometheus metrics helpers for HumanGate.

Shared counter definitions for the trust and effort services. Labels
carry only coarse outcomes, never identities or behavioral values.
"""

from __future__ import annotations

from prometheus_client import Counter

RATE_LIMIT_DECISIONS = Counter(
    "humangate_rate_limit_decisions_total",
    "Rate-limit decisions by outcome.",
    ["outcome"],
)
REPUTATION_EVENTS = Counter(
    "humangate_reputation_events_total",
    "Reputation events applied, by event type.",
    ["event"],
)
PERSISTENCE_FAILURES = Counter(
    "humangate_persistence_failures_total",
    "Durable-store calls that failed or timed out.",
    ["op"],
)
PROOF_REQUESTS = Counter(
    "humangate_proof_requests_total",
    "Threshold-proof requests by resulting status.",
    ["status"],
)
ZK_VERIFICATIONS = Counter(
    "humangate_zk_verifications_total",
    "Digest verifications by path taken.",
    ["result"],
)
