"""orders/create webhook: Shopify pushes the order right after checkout.

Contract:
- 401 on HMAC failure, no payload processing
- 400 when the payload itself is unusable (wrong topic, not a JSON object,
  no shop domain, no order id)
- 200 with an empty body otherwise, including downstream rejections and
  transport failures, which are logged and swallowed
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, Response

from order_sync.audit import log_event
from order_sync.errors import InputError
from order_sync.models import Accepted, DownstreamRejected
from order_sync.normalizer import OrderSource
from order_sync.pipeline import Pipeline, get_pipeline
from order_sync.verification import (
    WEBHOOK_HMAC_HEADER,
    WEBHOOK_SHOP_HEADER,
    WEBHOOK_TOPIC_HEADER,
    verify_webhook_hmac,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])

_CHANNEL = "webhook"
ORDERS_CREATE_TOPIC = "orders/create"


@router.post("/webhooks/orders/create")
async def orders_create(request: Request, pipeline: Pipeline = Depends(get_pipeline)) -> Response:
    """Receive orders/create and forward custom image URLs."""
    body = await request.body()
    shop = request.headers.get(WEBHOOK_SHOP_HEADER, "").strip()

    if not verify_webhook_hmac(
        pipeline.settings.shopify_api_secret, body, request.headers.get(WEBHOOK_HMAC_HEADER)
    ):
        log_event(_CHANNEL, shop, None, "signature_failed")
        return Response(status_code=401)

    topic = request.headers.get(WEBHOOK_TOPIC_HEADER, "")
    if topic != ORDERS_CREATE_TOPIC:
        log_event(_CHANNEL, shop, None, f"unexpected_topic:{topic or 'none'}")
        return Response(status_code=400)

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        log_event(_CHANNEL, shop, None, "invalid_json")
        return Response(status_code=400)

    if not shop or not isinstance(payload, dict):
        log_event(_CHANNEL, shop, None, "invalid_payload")
        return Response(status_code=400)

    try:
        order, outcome = await pipeline.sync(OrderSource.WEBHOOK, shop, payload)
    except InputError as e:
        logger.error("orders/create webhook from %s unusable: %s", shop, e)
        log_event(_CHANNEL, shop, None, "missing_order_id")
        return Response(status_code=400)
    except Exception:
        logger.exception("orders/create webhook from %s failed", shop)
        log_event(_CHANNEL, shop, None, "error")
        return Response(status_code=200)

    if isinstance(outcome, Accepted):
        log_event(_CHANNEL, shop, order.order_id, "accepted")
    elif isinstance(outcome, DownstreamRejected):
        log_event(_CHANNEL, shop, order.order_id, f"downstream_rejected:{outcome.status}")
    else:
        log_event(_CHANNEL, shop, order.order_id, "transport_failure")

    return Response(status_code=200)
