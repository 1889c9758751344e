"""Storefront app proxy endpoint, called from the order confirmation page.

URL from the storefront: /apps/<proxy-subpath>/save-order-metafield?order_id=123
Shopify forwards it here with ``shop``, ``timestamp`` and ``signature`` added.
The call carries only the order id, so the order is loaded through the Admin
GraphQL API before normalization.

Responses are ``{"ok": bool, ...}`` JSON:
    200 ok, order_id
    400 missing order_id, invalid proxy signature, no order id after load
    403 app not installed for the shop (no offline access token)
    404 order not found or access denied
    502 order query failed, or downstream rejected the order
    500 downstream unreachable
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from order_sync.audit import log_event
from order_sync.errors import InputError, OrderNotFound, UpstreamQueryError
from order_sync.models import Accepted, DownstreamRejected
from order_sync.normalizer import OrderSource
from order_sync.pipeline import Pipeline, get_pipeline
from order_sync.verification import verify_app_proxy_signature

logger = logging.getLogger(__name__)

router = APIRouter(tags=["app-proxy"])

_CHANNEL = "proxy"


def _fail(error: str, status_code: int) -> JSONResponse:
    return JSONResponse({"ok": False, "error": error}, status_code=status_code)


@router.get("/save-order-metafield")
async def save_order_metafield(
    request: Request, pipeline: Pipeline = Depends(get_pipeline)
) -> JSONResponse:
    """Load the order by id, normalize it and forward it."""
    order_id_param = (request.query_params.get("order_id") or "").strip()
    if not order_id_param:
        log_event(_CHANNEL, None, None, "missing_order_id")
        return _fail("missing order_id", 400)

    if not verify_app_proxy_signature(
        pipeline.settings.shopify_api_secret, request.query_params.multi_items()
    ):
        log_event(_CHANNEL, None, order_id_param, "signature_failed")
        return _fail("invalid app proxy", 400)

    shop = (request.query_params.get("shop") or "").strip()
    access_token = pipeline.tokens.get(shop)
    if not shop or not access_token:
        log_event(_CHANNEL, shop, order_id_param, "not_installed")
        return _fail("app not installed or session missing", 403)

    try:
        data = await pipeline.admin.fetch_order(shop, access_token, order_id_param)
        order, outcome = await pipeline.sync(OrderSource.PROXY, shop, data)
    except OrderNotFound as e:
        log_event(_CHANNEL, shop, order_id_param, "order_not_found")
        return _fail(str(e), 404)
    except UpstreamQueryError:
        log_event(_CHANNEL, shop, order_id_param, "query_failed")
        return _fail("failed to load order", 502)
    except InputError:
        log_event(_CHANNEL, shop, order_id_param, "missing_order_id")
        return _fail("order id missing", 400)
    except Exception:
        logger.exception("App proxy sync for %s order %s failed", shop, order_id_param)
        log_event(_CHANNEL, shop, order_id_param, "error")
        return _fail("internal error", 500)

    if isinstance(outcome, DownstreamRejected):
        log_event(_CHANNEL, shop, order.order_id, f"downstream_rejected:{outcome.status}")
        return _fail("backend error", 502)
    if not isinstance(outcome, Accepted):
        log_event(_CHANNEL, shop, order.order_id, "transport_failure")
        return _fail("internal error", 500)

    log_event(_CHANNEL, shop, order.order_id, "accepted")
    return JSONResponse({"ok": True, "order_id": order.order_id})
