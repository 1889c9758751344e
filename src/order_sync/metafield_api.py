"""HTTP client for the order metafield backend.

Endpoints:
- POST /api/order-metafield        save order line items + custom image URLs
- GET  /api/order-metafield        read back stored data
- GET  /order-images-zip           download the order's images as a zip

Methods return the raw httpx.Response and let httpx.HTTPError propagate;
status interpretation belongs to the caller (see order_sync.forwarder).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class MetafieldApiClient:
    """Thin wrapper over a shared httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, timeout: float = 15.0) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    async def post_order_metafield(self, payload: dict[str, Any]) -> httpx.Response:
        """POST /api/order-metafield with ``{shop, order_id, line_items, images}``."""
        return await self._client.post(
            f"{self._base_url}/api/order-metafield",
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
        )

    async def get_order_metafield(self, shop: str, order_id: Any) -> httpx.Response:
        """GET /api/order-metafield?shop=&order_id="""
        return await self._client.get(
            f"{self._base_url}/api/order-metafield",
            params={"shop": shop, "order_id": str(order_id)},
            timeout=self._timeout,
        )

    async def get_order_images_zip(self, shop: str, order_id: Any) -> httpx.Response:
        """GET /order-images-zip?shop=&order_id= (binary body)."""
        return await self._client.get(
            f"{self._base_url}/order-images-zip",
            params={"shop": shop, "order_id": str(order_id)},
            timeout=self._timeout,
        )
