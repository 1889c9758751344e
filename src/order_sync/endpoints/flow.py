"""Shopify Flow "Order created -> Send HTTP request" endpoint.

Alternative to the orders/create webhook for stores where the webhook
subscription is not active. Flow posts ``{"shop": ..., "order": {...}}`` with
the order mapped to webhook shape (id, line_items with properties).

Responses (JSON):
    200 {"ok": true, "order_id": ...}
    400 invalid JSON, missing shop/order, missing order id
    401 X-Flow-Secret mismatch (only when FLOW_WEBHOOK_SECRET is set)
    405 any method other than POST
    502 downstream rejected the order
    500 downstream unreachable
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from order_sync.audit import log_event
from order_sync.errors import InputError
from order_sync.models import Accepted, DownstreamRejected
from order_sync.normalizer import OrderSource
from order_sync.pipeline import Pipeline, get_pipeline
from order_sync.verification import FLOW_SECRET_HEADER, check_flow_secret

logger = logging.getLogger(__name__)

router = APIRouter(tags=["flow"])

_CHANNEL = "flow"


@router.post("/api/flow/order-created")
async def flow_order_created(
    request: Request, pipeline: Pipeline = Depends(get_pipeline)
) -> JSONResponse:
    """Normalize and forward an order sent by a Flow HTTP action."""
    if not check_flow_secret(
        pipeline.settings.flow_webhook_secret, request.headers.get(FLOW_SECRET_HEADER)
    ):
        log_event(_CHANNEL, None, None, "secret_failed")
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        log_event(_CHANNEL, None, None, "invalid_json")
        return JSONResponse({"error": "Invalid JSON"}, status_code=400)
    if not isinstance(body, dict):
        log_event(_CHANNEL, None, None, "invalid_json")
        return JSONResponse({"error": "Invalid JSON"}, status_code=400)

    shop = body.get("shop")
    shop = shop.strip() if isinstance(shop, str) else ""
    order = body.get("order")
    if not shop or not order:
        log_event(_CHANNEL, shop, None, "missing_shop_or_order")
        return JSONResponse({"error": "Missing shop or order in body"}, status_code=400)

    try:
        normalized, outcome = await pipeline.sync(OrderSource.FLOW, shop, order)
    except InputError:
        log_event(_CHANNEL, shop, None, "missing_order_id")
        return JSONResponse({"error": "Order id not found in order payload"}, status_code=400)
    except Exception:
        logger.exception("Flow order-created call from %s failed", shop)
        log_event(_CHANNEL, shop, None, "error")
        return JSONResponse({"error": "Internal error"}, status_code=500)

    if isinstance(outcome, DownstreamRejected):
        log_event(_CHANNEL, shop, normalized.order_id, f"downstream_rejected:{outcome.status}")
        return JSONResponse(
            {"error": "Downstream API error", "status": outcome.status},
            status_code=502,
        )
    if not isinstance(outcome, Accepted):
        log_event(_CHANNEL, shop, normalized.order_id, "transport_failure")
        return JSONResponse({"error": "Internal error"}, status_code=500)

    log_event(_CHANNEL, shop, normalized.order_id, "accepted")
    return JSONResponse({"ok": True, "order_id": normalized.order_id}, status_code=200)
