"""FastAPI application factory.

Routes:
    POST /webhooks/orders/create               orders/create webhook
    POST /api/flow/order-created               Shopify Flow HTTP action
    GET  {APP_PROXY_PATH}/save-order-metafield storefront app proxy
    GET  /admin/orders/metafield, /admin/orders/zip, /admin/status
    GET  /health
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from order_sync.config import Settings, get_settings
from order_sync.endpoints import admin, flow, proxy, webhooks
from order_sync.pipeline import Pipeline

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app.

    Args:
        settings: Explicit settings (defaults to the environment)
        transport: httpx transport for outbound calls (tests pass a MockTransport)
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with httpx.AsyncClient(transport=transport) as client:
            app.state.pipeline = Pipeline.build(settings, client)
            logger.info(
                "Order sync started: metafield API %s, app proxy at %s",
                settings.metafield_api_base,
                settings.app_proxy_path,
            )
            yield

    app = FastAPI(title="Order Sync", lifespan=lifespan)

    app.include_router(webhooks.router)
    app.include_router(flow.router)
    app.include_router(proxy.router, prefix=settings.app_proxy_path.rstrip("/"))
    app.include_router(admin.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
