"""Forward a NormalizedOrder to the order metafield backend.

Classification:
- 2xx                         -> Accepted
- any other status            -> DownstreamRejected(status, body)
- no response (httpx error)   -> TransportFailure(cause)

No retries here. Whether a failed forward is retried depends on the channel
(Shopify redelivers webhooks on its own schedule, Flow does not), so the
endpoint decides.
"""

from __future__ import annotations

import logging

import httpx

from order_sync.metafield_api import MetafieldApiClient
from order_sync.models import (
    Accepted,
    DownstreamRejected,
    NormalizedOrder,
    SyncOutcome,
    TransportFailure,
)

logger = logging.getLogger(__name__)

# Rejection bodies are truncated in logs only; the outcome keeps the full text
_MAX_LOGGED_BODY = 500


def _truncate(text: str) -> str:
    if len(text) > _MAX_LOGGED_BODY:
        return text[:_MAX_LOGGED_BODY] + "..."
    return text


class SyncForwarder:
    """Single-shot sender for normalized orders."""

    def __init__(self, api: MetafieldApiClient) -> None:
        self._api = api

    async def forward(self, order: NormalizedOrder) -> SyncOutcome:
        """Send ``order`` and classify the result. Never raises for HTTP failures."""
        try:
            response = await self._api.post_order_metafield(order.to_payload())
            body = response.text
        except httpx.HTTPError as e:
            logger.error(
                "Order metafield call failed for %s/%s: %s: %s",
                order.shop,
                order.order_id,
                type(e).__name__,
                e,
            )
            return TransportFailure(cause=f"{type(e).__name__}: {e}")

        if not response.is_success:
            logger.error(
                "Order metafield API rejected %s/%s: HTTP %d %s",
                order.shop,
                order.order_id,
                response.status_code,
                _truncate(body),
            )
            return DownstreamRejected(status=response.status_code, body=body)

        logger.info(
            "Order metafield saved for %s/%s (%d line items, %d images)",
            order.shop,
            order.order_id,
            len(order.line_items),
            len(order.images),
        )
        return Accepted(status=response.status_code)
