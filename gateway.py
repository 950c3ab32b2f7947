"""
Submission Gateway
==================
Sends a composed order to the external order-intake endpoint.

The endpoint is a cross-origin form sink whose response is opaque to the
storefront. Acceptance is inferred from the send completing without a
transport error; status and body are never inspected. Endpoint-side
rejections are therefore invisible here and count as sent.
"""

import time
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Dict, Any, Optional

import httpx
from prometheus_client import Counter, Histogram

from config import is_metrics_enabled
from payload import OrderPayload


logger = logging.getLogger(__name__)


# ============================================================================
# METRICS
# ============================================================================

gateway_submissions = Counter(
    'order_gateway_submissions_total',
    'Order payloads handed to the intake endpoint',
    ['outcome']
)
gateway_latency = Histogram(
    'order_gateway_latency_seconds',
    'Time spent sending an order payload'
)


# ============================================================================
# RESULT
# ============================================================================

class SubmissionOutcome(Enum):
    SENT = "sent"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class SubmissionResult:
    """
    Outcome of one send.

    error is diagnostic text for logs; it is never shown to buyers.
    """
    outcome: SubmissionOutcome
    error: Optional[str] = None
    duration_ms: float = 0.0

    @property
    def sent(self) -> bool:
        return self.outcome == SubmissionOutcome.SENT


# ============================================================================
# GATEWAY
# ============================================================================

class SubmissionGateway:
    """
    Fire-and-forget POST of order payloads.

    One submit() call issues exactly one request. There is no retry;
    a retry is always a new submit from the order form.
    """

    def __init__(
        self,
        action_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.action_url = action_url
        self.timeout = timeout

        # An injected client belongs to the caller and is not closed here
        self._client = client
        self._owns_client = client is None

        self.sent_count = 0
        self.failed_count = 0

        logger.info(f"SubmissionGateway initialized (endpoint: {action_url})")

    @classmethod
    def from_config(cls, config, client: Optional[httpx.AsyncClient] = None) -> 'SubmissionGateway':
        """Build a gateway from the loaded Config."""
        return cls(
            action_url=config.intake.action_url,
            timeout=float(config.intake.request_timeout),
            client=client
        )

    async def start(self):
        """Create the HTTP client if the gateway owns one."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
            logger.debug("Gateway HTTP client created")

    async def close(self):
        """Close the owned HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("Gateway HTTP client closed")

    async def __aenter__(self) -> 'SubmissionGateway':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def submit(self, payload: OrderPayload) -> SubmissionResult:
        """
        POST the payload as a form-encoded body.

        Args:
            payload: Composed order payload

        Returns:
            SENT if the request completed, TRANSPORT_ERROR if sending raised
        """
        started = time.monotonic()

        try:
            await self.start()
            await self._client.post(self.action_url, data=dict(payload.fields))

        except httpx.HTTPError as e:
            return self._failed(started, f"{type(e).__name__}: {e}")

        except Exception as e:
            logger.exception("Unexpected error while sending order")
            return self._failed(started, f"{type(e).__name__}: {e}")

        duration_ms = (time.monotonic() - started) * 1000
        self.sent_count += 1

        if is_metrics_enabled():
            gateway_submissions.labels(outcome=SubmissionOutcome.SENT.value).inc()
            gateway_latency.observe(duration_ms / 1000)

        logger.info(
            f"Order sent ({payload.item_count} units, {duration_ms:.0f}ms)"
        )

        return SubmissionResult(
            outcome=SubmissionOutcome.SENT,
            duration_ms=duration_ms
        )

    def _failed(self, started: float, error: str) -> SubmissionResult:
        duration_ms = (time.monotonic() - started) * 1000
        self.failed_count += 1

        if is_metrics_enabled():
            gateway_submissions.labels(
                outcome=SubmissionOutcome.TRANSPORT_ERROR.value
            ).inc()
            gateway_latency.observe(duration_ms / 1000)

        logger.error(f"Order send failed after {duration_ms:.0f}ms: {error}")

        return SubmissionResult(
            outcome=SubmissionOutcome.TRANSPORT_ERROR,
            error=error,
            duration_ms=duration_ms
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get gateway statistics."""
        return {
            "endpoint": self.action_url,
            "sent": self.sent_count,
            "failed": self.failed_count,
        }
