"""
Exception hierarchy for HumanGate.

Only collaborator failures are exceptions. Rate-limit rejections are
returned as structured results and never raised.
"""

from __future__ import annotations


class HumanGateError(Exception):
    """Base class for all HumanGate errors."""


class PersistenceError(HumanGateError):
    """A durable-store call failed or timed out."""

    def __init__(self, op: str, message: str = "") -> None:
        self.op = op
        super().__init__(f"{op}: {message}" if message else op)


class ProverError(HumanGateError):
    """The external prover failed, timed out, or answered with garbage."""
