"""Order normalization: three source shapes, one NormalizedOrder.

Each source has an adapter whose only job is shape translation into the
webhook-equivalent intermediate form (an order mapping with ``line_items``
carrying ``properties`` as name/value pairs). A single core then builds the
NormalizedOrder from that form:

    raw payload --adapter--> webhook-shaped order --core--> NormalizedOrder

Contract:
- Normalization is a pure function of its input (no I/O, no shared state)
- Order id resolution failure raises MissingOrderId; no sentinel ids
- Non-list line_items / properties are treated as empty, never an error
- Image dedup is exact string match, first occurrence wins
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable

from order_sync.errors import MissingOrderId, OrderNotFound
from order_sync.images import extract_image_references
from order_sync.models import LineItemProperty, NormalizedLineItem, NormalizedOrder

logger = logging.getLogger(__name__)


class OrderSource(str, Enum):
    """Channel a raw order payload arrived through."""

    WEBHOOK = "webhook"
    FLOW = "flow"
    PROXY = "proxy"


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


def strip_gid(value: Any) -> Any:
    """Return the trailing segment of a global id (``gid://shopify/Order/9`` -> ``"9"``).

    Values without a ``/`` are returned unchanged; ``None`` stays ``None``.
    """
    if not isinstance(value, str) or "/" not in value:
        return value
    return value.rsplit("/", 1)[-1] or None


def resolve_order_id(order: Any) -> Any:
    """Resolve an order id from a webhook-shaped order.

    Prefers a direct ``id``; otherwise takes the segment after the last ``/``
    of ``admin_graphql_api_id``. Returns None when neither yields a value.
    """
    if not isinstance(order, Mapping):
        return None
    direct = order.get("id")
    if direct is not None and direct != "":
        return direct
    gid = order.get("admin_graphql_api_id")
    if isinstance(gid, str) and gid:
        return gid.rsplit("/", 1)[-1] or None
    return None


# ---------------------------------------------------------------------------
# Source adapters
# ---------------------------------------------------------------------------


def _adapt_webhook(raw: Any) -> Mapping[str, Any]:
    """orders/create webhook payloads are already in the intermediate shape."""
    return raw if isinstance(raw, Mapping) else {}


def _adapt_flow(raw: Any) -> Mapping[str, Any]:
    """Flow calls send the order object in webhook shape by contract."""
    return raw if isinstance(raw, Mapping) else {}


def _adapt_graphql(raw: Any) -> Mapping[str, Any]:
    """Translate an Admin GraphQL ``order`` query result into webhook shape.

    Accepts either the ``data`` object (``{"order": {...}}``) or the order
    node itself. Raises OrderNotFound when no order is present.
    """
    order = raw.get("order") if isinstance(raw, Mapping) and "order" in raw else raw
    if not isinstance(order, Mapping) or not order:
        raise OrderNotFound("order not found")

    line_connection = order.get("lineItems")
    edges = line_connection.get("edges") if isinstance(line_connection, Mapping) else None
    line_items = []
    for edge in edges if isinstance(edges, list) else []:
        node = edge.get("node") if isinstance(edge, Mapping) else None
        if not isinstance(node, Mapping):
            continue
        variant = node.get("variant") or {}
        attributes = node.get("customAttributes") or []
        line_items.append(
            {
                "id": strip_gid(node.get("id")),
                "name": node.get("name"),
                "title": node.get("title"),
                "quantity": node.get("quantity") if node.get("quantity") is not None else 1,
                "sku": node.get("sku"),
                "variant_id": strip_gid(variant.get("id")),
                "product_id": None,
                "price": None,
                "properties": [
                    {"name": a.get("key"), "value": a.get("value") if a.get("value") is not None else ""}
                    for a in attributes
                    if isinstance(a, Mapping)
                ],
            }
        )

    return {
        "id": strip_gid(order.get("id")),
        "admin_graphql_api_id": order.get("id"),
        "line_items": line_items,
    }


_ADAPTERS: dict[OrderSource, Callable[[Any], Mapping[str, Any]]] = {
    OrderSource.WEBHOOK: _adapt_webhook,
    OrderSource.FLOW: _adapt_flow,
    OrderSource.PROXY: _adapt_graphql,
}


# ---------------------------------------------------------------------------
# Shared core
# ---------------------------------------------------------------------------


def _to_properties(raw_props: Any) -> list[LineItemProperty]:
    if not isinstance(raw_props, (list, tuple)):
        return []
    props = []
    for p in raw_props:
        if not isinstance(p, Mapping):
            continue
        name = p.get("name")
        value = p.get("value")
        props.append(
            LineItemProperty(
                name="" if name is None else str(name),
                value="" if value is None else str(value),
            )
        )
    return props


def dedupe_images(images: list[str]) -> list[str]:
    """Drop exact duplicates, keeping first-occurrence order."""
    return list(dict.fromkeys(images))


def build_normalized_order(shop: str, order: Mapping[str, Any]) -> NormalizedOrder:
    """Build a NormalizedOrder from a webhook-shaped order mapping.

    Raises:
        MissingOrderId: if no order id can be resolved.
    """
    order_id = resolve_order_id(order)
    if order_id is None:
        raise MissingOrderId()

    raw_lines = order.get("line_items")
    if not isinstance(raw_lines, (list, tuple)):
        raw_lines = []

    line_items: list[NormalizedLineItem] = []
    all_images: list[str] = []
    for line in raw_lines:
        if not isinstance(line, Mapping):
            continue
        properties = _to_properties(line.get("properties"))
        images = extract_image_references(properties)
        all_images.extend(images)
        line_items.append(
            NormalizedLineItem(
                id=line.get("id"),
                name=line.get("name"),
                title=line.get("title"),
                quantity=line.get("quantity"),
                price=line.get("price"),
                sku=line.get("sku"),
                variant_id=line.get("variant_id"),
                product_id=line.get("product_id"),
                properties=properties,
                primary_image_url=images[0] if images else None,
            )
        )

    return NormalizedOrder(
        shop=shop,
        order_id=order_id,
        line_items=line_items,
        images=dedupe_images(all_images),
    )


def normalize(source: OrderSource, shop: str, raw: Any) -> NormalizedOrder:
    """Normalize a raw payload from ``source`` into a NormalizedOrder.

    Args:
        source: Channel the payload came from (selects the shape adapter)
        shop: Verified shop domain
        raw: Source-specific payload

    Raises:
        MissingOrderId: order id could not be resolved
        OrderNotFound: GraphQL payload carries no order (proxy source only)
    """
    adapter = _ADAPTERS[OrderSource(source)]
    order = adapter(raw)
    normalized = build_normalized_order(shop, order)
    logger.debug(
        "Normalized %s order %s for %s: %d line items, %d images",
        OrderSource(source).value,
        normalized.order_id,
        shop,
        len(normalized.line_items),
        len(normalized.images),
    )
    return normalized
