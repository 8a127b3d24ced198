"""
HumanGate trust service.

Behavioral gatekeeping for proof submissions: sliding-window rate
limiting, anomaly logging, and an exponentially decaying reputation
score per identity.
"""

from trust.engine import TrustEngine
from trust.state import TrustState

__all__ = ["TrustEngine", "TrustState"]
