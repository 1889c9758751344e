"""Exponential backoff with jitter for read-only API calls.

Retries on transient HTTP errors (429, 500, 502, 503, 504) and connection
errors. Respects Retry-After headers. Logs each retry attempt.

Used for the order-detail query only. The forward to the metafield backend
is single-shot; retry there is decided per channel.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import random
from typing import Any, Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

# HTTP status codes that trigger a retry
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def retry_with_backoff(
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 5.0,
    jitter: float = 0.3,
) -> Callable:
    """Decorator: retry a coroutine function with exponential backoff + jitter.

    Args:
        max_retries: Maximum number of retry attempts.
        base_delay: Initial delay in seconds.
        max_delay: Maximum delay cap in seconds.
        jitter: Jitter factor (0.0-1.0).

    The wrapped call may pass ``_max_retries=`` to override ``max_retries``
    for one invocation. Negative values mean a single attempt.
    """

    def decorator(fn: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, _max_retries: int | None = None, **kwargs: Any) -> Any:
            retries = max(0, max_retries if _max_retries is None else _max_retries)
            for attempt in range(retries + 1):
                try:
                    return await fn(*args, **kwargs)
                except httpx.HTTPStatusError as e:
                    status = e.response.status_code
                    if status not in RETRYABLE_STATUS_CODES or attempt == retries:
                        raise
                    delay = _compute_delay(attempt, base_delay, max_delay, jitter, e.response)
                    logger.warning(
                        "Retry %d/%d for %s (HTTP %d), waiting %.1fs",
                        attempt + 1,
                        retries,
                        fn.__name__,
                        status,
                        delay,
                    )
                    await asyncio.sleep(delay)
                except httpx.TransportError as e:
                    if attempt == retries:
                        raise
                    delay = _compute_delay(attempt, base_delay, max_delay, jitter)
                    logger.warning(
                        "Retry %d/%d for %s (connection error: %s), waiting %.1fs",
                        attempt + 1,
                        retries,
                        fn.__name__,
                        type(e).__name__,
                        delay,
                    )
                    await asyncio.sleep(delay)
            raise RuntimeError("unreachable")  # pragma: no cover

        return wrapper

    return decorator


def _compute_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter: float,
    response: httpx.Response | None = None,
) -> float:
    """Compute delay with exponential backoff + jitter, respecting Retry-After."""
    if response is not None:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return min(float(retry_after), max_delay)
            except ValueError:
                pass

    delay = min(base_delay * (2**attempt), max_delay)
    jitter_amount = delay * jitter
    delay += random.uniform(-jitter_amount, jitter_amount)

    return max(0.0, delay)
