"""Inbound request verification: constant-time checks for each channel.

Security contract:
- All comparisons use hmac.compare_digest() on bytes (constant-time; non-ASCII
  input compares unequal instead of raising)
- Webhook HMAC and app proxy signature fail closed when no app secret is set
- Flow shared-secret check is skipped when FLOW_WEBHOOK_SECRET is unset
  (Flow cannot sign requests; the header is the only credential it sends)
- Admin bearer token fails closed when ADMIN_API_TOKEN is unset
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Header names (lowercase, as read from Starlette's case-insensitive headers)
WEBHOOK_HMAC_HEADER = "x-shopify-hmac-sha256"
WEBHOOK_TOPIC_HEADER = "x-shopify-topic"
WEBHOOK_SHOP_HEADER = "x-shopify-shop-domain"
FLOW_SECRET_HEADER = "x-flow-secret"


def verify_webhook_hmac(secret: str, body: bytes, signature_header: str | None) -> bool:
    """Verify a Shopify webhook HMAC-SHA256 signature.

    Shopify sends the base64-encoded HMAC-SHA256 of the raw body in
    X-Shopify-Hmac-SHA256, keyed with the app's API secret.

    Args:
        secret: App API secret
        body: Raw request body bytes
        signature_header: Value of X-Shopify-Hmac-SHA256 header

    Returns:
        True if signature is valid
    """
    if not secret:
        logger.warning("SHOPIFY_API_SECRET not set; rejecting webhook")
        return False
    if not signature_header:
        return False

    computed = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    computed_b64 = base64.b64encode(computed).decode("utf-8")

    return hmac.compare_digest(computed_b64.encode("utf-8"), signature_header.encode("utf-8"))


def app_proxy_message(params: Iterable[tuple[str, str]]) -> str:
    """Build the string Shopify signs for app proxy requests.

    Every query parameter except ``signature`` is rendered as ``key=value``
    (repeated keys joined with ``,``), sorted, and concatenated with no
    separator.
    """
    grouped: dict[str, list[str]] = {}
    for key, value in params:
        if key == "signature":
            continue
        grouped.setdefault(key, []).append(value)
    return "".join(sorted(f"{key}={','.join(values)}" for key, values in grouped.items()))


def verify_app_proxy_signature(secret: str, params: Iterable[tuple[str, str]]) -> bool:
    """Verify the ``signature`` query parameter of an app proxy request.

    Args:
        secret: App API secret
        params: Query parameters as (key, value) pairs, repeats allowed

    Returns:
        True if the hex HMAC-SHA256 of the sorted parameters matches
    """
    if not secret:
        logger.warning("SHOPIFY_API_SECRET not set; rejecting app proxy request")
        return False

    pairs = list(params)
    signature = next((value for key, value in pairs if key == "signature"), None)
    if not signature:
        return False

    computed = hmac.new(
        secret.encode("utf-8"),
        app_proxy_message(pairs).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()

    return hmac.compare_digest(computed.encode("utf-8"), signature.encode("utf-8"))


def check_flow_secret(secret: str, header_value: str | None) -> bool:
    """Check the X-Flow-Secret header. Always passes when no secret is configured."""
    if not secret:
        return True
    if header_value is None:
        return False
    return hmac.compare_digest(header_value.encode("utf-8"), secret.encode("utf-8"))


def check_bearer_token(expected: str, authorization_header: str | None) -> bool:
    """Check an ``Authorization: Bearer <token>`` header against ``expected``."""
    if not expected:
        logger.warning("ADMIN_API_TOKEN not set; rejecting admin request")
        return False
    if not authorization_header:
        return False
    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return False
    return hmac.compare_digest(token.strip().encode("utf-8"), expected.encode("utf-8"))
