"""Shared fixtures for the order sync test suite.

Outbound HTTP never leaves the process: every app is built with an
httpx.MockTransport routed through FakeUpstream, which plays both the order
metafield backend and the Shopify Admin GraphQL API.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from typing import Any, Callable
from urllib.parse import urlencode

import httpx
import pytest
from fastapi.testclient import TestClient

from order_sync.app import create_app
from order_sync.audit import reset_counts
from order_sync.config import Settings
from order_sync.verification import app_proxy_message

API_SECRET = "shpss_test_secret"
SHOP = "demo-store.myshopify.com"
METAFIELD_BASE = "https://metafield.test/backend"


class FakeUpstream:
    """Routes outbound requests to per-service handlers and records them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.metafield_handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"ok": True})
        )
        self.graphql_handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"data": {"order": None}})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/graphql.json"):
            return self.graphql_handler(request)
        return self.metafield_handler(request)

    def posts_to(self, path: str) -> list[dict[str, Any]]:
        """JSON bodies of POSTs whose path ends with ``path``."""
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == "POST" and r.url.path.endswith(path)
        ]


@pytest.fixture
def _reset_audit_counts():
    reset_counts()
    yield
    reset_counts()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        metafield_api_base=METAFIELD_BASE,
        shopify_api_secret=API_SECRET,
        shopify_access_tokens={SHOP: "shpat_test_token"},
        flow_webhook_secret="",
        admin_api_token="admin-token",
        admin_query_retries=0,
    )


@pytest.fixture
def make_client(upstream: FakeUpstream, _reset_audit_counts):
    """Factory: TestClient for an app built from the given settings."""
    clients: list[TestClient] = []

    def _make(settings: Settings) -> TestClient:
        app = create_app(settings, transport=httpx.MockTransport(upstream))
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, settings: Settings) -> TestClient:
    return make_client(settings)


def sign_webhook(body: bytes, secret: str = API_SECRET) -> str:
    """Compute a valid X-Shopify-Hmac-SHA256 header value."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def signed_proxy_query(params: dict[str, str], secret: str = API_SECRET) -> str:
    """Build an app proxy query string with a valid ``signature``."""
    message = app_proxy_message(params.items())
    signature = hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()
    return urlencode({**params, "signature": signature})
