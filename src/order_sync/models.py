"""Canonical order data model.

A NormalizedOrder is built fresh for each triggering event, handed to the
forwarder once, then discarded. The downstream backend is the system of
record; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class LineItemProperty:
    """Free-form key/value attached to a line item at checkout."""

    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class NormalizedLineItem:
    """One line item in canonical shape.

    ``id`` is opaque: numeric for webhook payloads, the trailing segment of
    a global identifier for GraphQL payloads.
    """

    id: Any
    name: str | None = None
    title: str | None = None
    quantity: int | None = None
    price: str | None = None
    sku: str | None = None
    variant_id: Any = None
    product_id: Any = None
    properties: list[LineItemProperty] = field(default_factory=list)
    primary_image_url: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire form sent to the order metafield backend."""
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "quantity": self.quantity,
            "price": self.price,
            "sku": self.sku,
            "variant_id": self.variant_id,
            "product_id": self.product_id,
            "properties": [p.to_dict() for p in self.properties],
            "custom_image_url": self.primary_image_url,
        }


@dataclass
class NormalizedOrder:
    """Canonical order: line items plus the order-level deduplicated image list."""

    shop: str
    order_id: Any
    line_items: list[NormalizedLineItem] = field(default_factory=list)
    images: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Request body for POST /api/order-metafield."""
        return {
            "shop": self.shop,
            "order_id": self.order_id,
            "line_items": [item.to_payload() for item in self.line_items],
            "images": list(self.images),
        }


# ---------------------------------------------------------------------------
# Forwarding outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Accepted:
    """Downstream API answered 2xx."""

    status: int = 200


@dataclass(frozen=True)
class DownstreamRejected:
    """Downstream API answered with a non-success status."""

    status: int
    body: str = ""


@dataclass(frozen=True)
class TransportFailure:
    """No response could be obtained from the downstream API."""

    cause: str


SyncOutcome = Union[Accepted, DownstreamRejected, TransportFailure]
