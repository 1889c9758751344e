"""Order sync: normalizes order-created events and forwards custom image URLs.

Three channels feed the same pipeline:
- orders/create webhook (HMAC-verified)
- Shopify Flow "Send HTTP request" call (optional shared secret)
- Storefront app proxy call (signature-verified, fetches the order via GraphQL)

Each event is normalized into a NormalizedOrder and forwarded once to the
order metafield backend.
"""
