"""Per-app pipeline wiring shared by the ingestion endpoints.

One Pipeline is built in the app lifespan around a single httpx.AsyncClient
(connection pooling only). Endpoints reach it through the ``get_pipeline``
dependency; nothing in it is mutated per request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import Request

from order_sync.config import Settings
from order_sync.forwarder import SyncForwarder
from order_sync.metafield_api import MetafieldApiClient
from order_sync.models import NormalizedOrder, SyncOutcome
from order_sync.normalizer import OrderSource, normalize
from order_sync.shopify_admin import AccessTokenStore, ShopifyAdminClient

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    """Services an ingestion endpoint needs."""

    settings: Settings
    metafield_api: MetafieldApiClient
    forwarder: SyncForwarder
    admin: ShopifyAdminClient
    tokens: AccessTokenStore

    @classmethod
    def build(cls, settings: Settings, client: httpx.AsyncClient) -> Pipeline:
        api = MetafieldApiClient(client, settings.metafield_api_base, settings.forward_timeout)
        return cls(
            settings=settings,
            metafield_api=api,
            forwarder=SyncForwarder(api),
            admin=ShopifyAdminClient(
                client,
                api_version=settings.shopify_api_version,
                timeout=settings.admin_query_timeout,
                max_retries=settings.admin_query_retries,
            ),
            tokens=AccessTokenStore.from_settings(settings),
        )

    async def sync(
        self, source: OrderSource, shop: str, raw: Any
    ) -> tuple[NormalizedOrder, SyncOutcome]:
        """Normalize ``raw`` and forward it once.

        Normalization errors (MissingOrderId, OrderNotFound) propagate before
        any network call; forwarding never raises for HTTP failures.
        """
        order = normalize(source, shop, raw)
        outcome = await self.forwarder.forward(order)
        return order, outcome


def get_pipeline(request: Request) -> Pipeline:
    """FastAPI dependency: the pipeline attached to the running app."""
    return request.app.state.pipeline
