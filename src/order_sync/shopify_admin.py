"""Shopify Admin GraphQL order-detail query.

The storefront proxy call carries only an order id, so the line items and
their custom attributes are loaded here before normalization.

Failure mapping:
- transport error, non-2xx after retries, unparseable body -> UpstreamQueryError
- GraphQL ``errors`` present, or ``data.order`` is null    -> OrderNotFound
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from order_sync.config import Settings
from order_sync.errors import OrderNotFound, UpstreamQueryError
from order_sync.retry import retry_with_backoff

logger = logging.getLogger(__name__)

ORDER_GID_PREFIX = "gid://shopify/Order/"

ORDER_QUERY = """
query getOrder($id: ID!) {
  order(id: $id) {
    id
    lineItems(first: 60) {
      edges {
        node {
          id
          name
          title
          quantity
          sku
          variant { id }
          customAttributes { key value }
        }
      }
    }
  }
}
"""


def order_gid(order_id: str) -> str:
    """Return ``order_id`` as an Order global id (passes existing gids through)."""
    order_id = str(order_id).strip()
    if order_id.startswith("gid://"):
        return order_id
    return f"{ORDER_GID_PREFIX}{order_id}"


class AccessTokenStore:
    """Offline Admin API tokens per shop, read from settings.

    ``SHOPIFY_ACCESS_TOKENS`` (JSON map) wins; ``SHOPIFY_ACCESS_TOKEN`` is the
    single-shop fallback. A shop with no token is treated as not installed.
    """

    def __init__(self, tokens: dict[str, str] | None = None, default_token: str = "") -> None:
        self._tokens = {k.lower(): v for k, v in (tokens or {}).items() if v}
        self._default = default_token

    @classmethod
    def from_settings(cls, settings: Settings) -> AccessTokenStore:
        return cls(settings.shopify_access_tokens, settings.shopify_access_token)

    def get(self, shop: str | None) -> str | None:
        if not shop:
            return None
        return self._tokens.get(shop.lower()) or self._default or None


class ShopifyAdminClient:
    """Order-detail queries against the Admin GraphQL API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_version: str = "2025-01",
        timeout: float = 30.0,
        max_retries: int = 2,
    ) -> None:
        self._client = client
        self._api_version = api_version
        self._timeout = timeout
        self._max_retries = max_retries

    def endpoint(self, shop: str) -> str:
        return f"https://{shop}/admin/api/{self._api_version}/graphql.json"

    @retry_with_backoff(max_retries=2, base_delay=0.5, max_delay=5.0)
    async def _graphql_request(
        self, shop: str, access_token: str, query: str, variables: dict | None = None
    ) -> dict:
        """Execute a Shopify GraphQL Admin API request."""
        response = await self._client.post(
            self.endpoint(shop),
            json={"query": query, "variables": variables or {}},
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
        )
        response.raise_for_status()
        return response.json()

    async def fetch_order(self, shop: str, access_token: str, order_id: str) -> dict[str, Any]:
        """Load one order's line items.

        Returns:
            The GraphQL ``data`` object, ``{"order": {...}}``.

        Raises:
            UpstreamQueryError: the query could not be completed
            OrderNotFound: the order does not exist or is not accessible
        """
        gid = order_gid(order_id)
        try:
            result = await self._graphql_request(
                shop,
                access_token,
                ORDER_QUERY,
                {"id": gid},
                _max_retries=self._max_retries,
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Order query failed for %s %s: %s: %s", shop, gid, type(e).__name__, e)
            raise UpstreamQueryError("failed to load order") from e

        if not isinstance(result, dict):
            raise UpstreamQueryError("failed to load order")

        errors = result.get("errors")
        if errors:
            logger.error("Order query returned GraphQL errors for %s %s: %s", shop, gid, errors)
            raise OrderNotFound("order not found or access denied")

        data = result.get("data")
        if not isinstance(data, dict) or not data.get("order"):
            raise OrderNotFound("order not found")
        return data
