"""Audit logging for ingestion events.

One line per handled event, keyed by channel, so the three channels can be
grepped and compared in the same log stream:

    ORDER_SYNC_AUDIT channel=flow shop=x.myshopify.com order=123 status=accepted count=4
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Per-channel event counters for /health (in-memory, per process)
_event_counts: dict[str, int] = {}


def log_event(channel: str, shop: str | None, order_id: Any, status: str) -> None:
    """Write an audit line and bump the channel counter."""
    _event_counts[channel] = _event_counts.get(channel, 0) + 1
    logger.info(
        "ORDER_SYNC_AUDIT channel=%s shop=%s order=%s status=%s count=%d",
        channel,
        shop or "unknown",
        order_id if order_id is not None else "unknown",
        status,
        _event_counts[channel],
    )


def event_counts() -> dict[str, int]:
    """Snapshot of the per-channel counters."""
    return dict(_event_counts)


def reset_counts() -> None:
    _event_counts.clear()
