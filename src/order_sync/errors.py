"""Order sync error taxonomy.

InputError          malformed or missing fields in the triggering payload (4xx)
UpstreamQueryError  the order-detail query failed (502)
OrderNotFound       the order-detail query returned no usable order (404)

Downstream rejections and transport failures are not exceptions; the
forwarder returns them as SyncOutcome values (see order_sync.models).
"""

from __future__ import annotations


class OrderSyncError(Exception):
    """Base class for order sync errors."""


class InputError(OrderSyncError):
    """Triggering payload is malformed or missing a required field."""


class MissingOrderId(InputError):
    """No order id could be resolved from the payload."""

    def __init__(self, message: str = "Order id not found in order payload") -> None:
        super().__init__(message)


class UpstreamQueryError(OrderSyncError):
    """The order-detail query could not be completed."""


class OrderNotFound(UpstreamQueryError):
    """The order-detail query completed but returned no usable order."""
