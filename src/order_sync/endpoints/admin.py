"""Admin passthrough routes for stored order data.

GET /admin/orders/metafield?shop=&order_id=   stored line items + images (JSON)
GET /admin/orders/zip?shop=&order_id=         order images as a zip download
GET /admin/status                             per-channel audit counters

All require ``Authorization: Bearer <ADMIN_API_TOKEN>``. Upstream status
codes pass through unchanged; an unreachable backend is a 502.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from order_sync.audit import event_counts
from order_sync.pipeline import Pipeline, get_pipeline
from order_sync.verification import check_bearer_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _query_args(request: Request) -> tuple[str, str] | None:
    shop = (request.query_params.get("shop") or "").strip()
    order_id = (request.query_params.get("order_id") or "").strip()
    if not shop or not order_id:
        return None
    return shop, order_id


def _authorized(request: Request, pipeline: Pipeline) -> bool:
    return check_bearer_token(
        pipeline.settings.admin_api_token, request.headers.get("authorization")
    )


@router.get("/orders/metafield")
async def order_metafield(request: Request, pipeline: Pipeline = Depends(get_pipeline)):
    """Return what the backend stored for an order."""
    if not _authorized(request, pipeline):
        return JSONResponse({"detail": "Not authenticated"}, status_code=401)
    args = _query_args(request)
    if args is None:
        return JSONResponse({"error": "Missing shop or order_id"}, status_code=400)
    shop, order_id = args

    try:
        res = await pipeline.metafield_api.get_order_metafield(shop, order_id)
    except httpx.HTTPError as e:
        logger.error("Order metafield lookup failed for %s/%s: %s", shop, order_id, e)
        return JSONResponse({"error": "Cannot reach order metafield API"}, status_code=502)

    try:
        data = res.json()
    except ValueError:
        data = {"raw": res.text}
    return JSONResponse(data, status_code=res.status_code)


@router.get("/orders/zip")
async def order_images_zip(request: Request, pipeline: Pipeline = Depends(get_pipeline)):
    """Proxy the backend's zip of an order's images."""
    if not _authorized(request, pipeline):
        return JSONResponse({"detail": "Not authenticated"}, status_code=401)
    args = _query_args(request)
    if args is None:
        return Response("Missing shop or order_id", status_code=400)
    shop, order_id = args

    try:
        res = await pipeline.metafield_api.get_order_images_zip(shop, order_id)
    except httpx.HTTPError as e:
        logger.error("Order images zip failed for %s/%s: %s", shop, order_id, e)
        return Response("Cannot reach order metafield API", status_code=502)

    if not res.is_success:
        return Response(res.text or f"Upstream error {res.status_code}", status_code=res.status_code)

    return Response(
        content=res.content,
        status_code=200,
        headers={
            "Content-Type": res.headers.get("content-type") or "application/zip",
            "Content-Disposition": res.headers.get("content-disposition")
            or f'attachment; filename="order-{order_id}-images.zip"',
        },
    )


@router.get("/status")
async def sync_status(request: Request, pipeline: Pipeline = Depends(get_pipeline)):
    """Per-channel event counts since process start."""
    if not _authorized(request, pipeline):
        return JSONResponse({"detail": "Not authenticated"}, status_code=401)
    return {"events": event_counts()}
