"""
Remote prover client.

Talks JSON over HTTP to an external proving service:

* ``POST {base_url}/proofs`` with ``{"metrics": ..., "thresholds": ...}``
  returns a ``ZKProofResult``.
* ``POST {base_url}/proofs/verify`` with ``{"proof": ..., "thresholds": ...}``
  returns ``{"valid": bool}``.

Transport errors and 5xx responses are retried with exponential back-off;
anything else, including malformed bodies, surfaces as ``ProverError``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from hg_common.errors import ProverError
from hg_common.models import HumanThresholds, ProcessMetrics, ZKProof, ZKProofResult

from effort.prover.base import Prover

logger = structlog.get_logger()

_DEFAULT_MAX_ATTEMPTS = 3
_DEFAULT_TIMEOUT_S = 5.0


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


class HttpProver(Prover):
    """Prover backed by a remote HTTP service.

    Uses :mod:`httpx` for async HTTP and :mod:`tenacity` for retry.

    Args:
        base_url: Root URL of the proving service.
        max_attempts: Attempts per request (default 3).
        timeout: Per-request timeout in seconds (default 5).
        headers: Optional extra headers sent with every request.
    """

    name: str = "http"

    def __init__(
        self,
        base_url: str,
        *,
        max_attempts: int = _DEFAULT_MAX_ATTEMPTS,
        timeout: float = _DEFAULT_TIMEOUT_S,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.headers = headers or {}
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Return (and lazily create) the shared ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        """POST *payload* to *path* with retry and return the decoded JSON body."""

        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async def _inner() -> httpx.Response:
            client = await self._get_client()
            resp = await client.post(
                f"{self.base_url}{path}",
                json=payload,
                headers={"Content-Type": "application/json", **self.headers},
            )
            resp.raise_for_status()
            return resp

        try:
            resp = await _inner()
            return resp.json()
        except httpx.HTTPError as exc:
            raise ProverError(f"{path}: {exc}") from exc
        except ValueError as exc:
            raise ProverError(f"{path}: response is not JSON") from exc

    # ── Prover interface ──

    async def generate_proof(
        self, metrics: ProcessMetrics, thresholds: HumanThresholds
    ) -> ZKProofResult:
        body = await self._post(
            "/proofs",
            {
                "metrics": metrics.model_dump(mode="json"),
                "thresholds": thresholds.model_dump(mode="json"),
            },
        )
        try:
            return ZKProofResult.model_validate(body)
        except ValidationError as exc:
            raise ProverError("/proofs: malformed proof result") from exc

    async def verify_proof(self, proof: ZKProof, thresholds: HumanThresholds) -> bool:
        body = await self._post(
            "/proofs/verify",
            {
                "proof": proof.model_dump(mode="json"),
                "thresholds": thresholds.model_dump(mode="json"),
            },
        )
        if not isinstance(body, dict) or not isinstance(body.get("valid"), bool):
            raise ProverError("/proofs/verify: malformed verification result")
        logger.debug("remote_proof_verified", prover=self.name, valid=body["valid"])
        return body["valid"]

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
