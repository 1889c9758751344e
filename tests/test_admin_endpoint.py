"""Admin passthrough routes: stored metafield data and images zip."""

from __future__ import annotations

import httpx

from conftest import SHOP

AUTH = {"Authorization": "Bearer admin-token"}


class TestAdminAuth:
    def test_missing_token_is_401(self, client, upstream):
        resp = client.get(f"/admin/orders/metafield?shop={SHOP}&order_id=1")
        assert resp.status_code == 401
        assert upstream.requests == []

    def test_wrong_token_is_401(self, client):
        resp = client.get(
            f"/admin/orders/zip?shop={SHOP}&order_id=1",
            headers={"Authorization": "Bearer nope"},
        )
        assert resp.status_code == 401

    def test_unset_token_locks_routes(self, make_client, settings):
        client = make_client(settings.model_copy(update={"admin_api_token": ""}))
        resp = client.get(f"/admin/orders/metafield?shop={SHOP}&order_id=1", headers=AUTH)
        assert resp.status_code == 401


class TestStatus:
    def test_requires_token(self, client):
        assert client.get("/admin/status").status_code == 401

    def test_counts_start_empty(self, client):
        resp = client.get("/admin/status", headers=AUTH)
        assert resp.status_code == 200
        assert resp.json() == {"events": {}}


class TestOrderMetafield:
    def test_passthrough(self, client, upstream):
        stored = {"order_id": "1", "images": ["https://cdn/x.png"]}
        upstream.metafield_handler = lambda r: httpx.Response(200, json=stored)

        resp = client.get(f"/admin/orders/metafield?shop={SHOP}&order_id=1", headers=AUTH)

        assert resp.status_code == 200
        assert resp.json() == stored
        request = upstream.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/backend/api/order-metafield"
        assert request.url.params["shop"] == SHOP
        assert request.url.params["order_id"] == "1"

    def test_upstream_error_status_passes_through(self, client, upstream):
        upstream.metafield_handler = lambda r: httpx.Response(404, text="not found")
        resp = client.get(f"/admin/orders/metafield?shop={SHOP}&order_id=1", headers=AUTH)
        assert resp.status_code == 404
        assert resp.json() == {"raw": "not found"}

    def test_missing_params(self, client):
        resp = client.get(f"/admin/orders/metafield?shop={SHOP}", headers=AUTH)
        assert resp.status_code == 400

    def test_unreachable_backend_is_502(self, client, upstream):
        def _refuse(request):
            raise httpx.ConnectError("refused", request=request)

        upstream.metafield_handler = _refuse
        resp = client.get(f"/admin/orders/metafield?shop={SHOP}&order_id=1", headers=AUTH)
        assert resp.status_code == 502


class TestOrderImagesZip:
    def test_zip_passthrough_preserves_headers(self, client, upstream):
        upstream.metafield_handler = lambda r: httpx.Response(
            200,
            content=b"PK\x03\x04zipdata",
            headers={
                "Content-Type": "application/x-zip-compressed",
                "Content-Disposition": 'attachment; filename="custom.zip"',
            },
        )
        resp = client.get(f"/admin/orders/zip?shop={SHOP}&order_id=1", headers=AUTH)

        assert resp.status_code == 200
        assert resp.content == b"PK\x03\x04zipdata"
        assert resp.headers["content-type"] == "application/x-zip-compressed"
        assert resp.headers["content-disposition"] == 'attachment; filename="custom.zip"'
        assert upstream.requests[0].url.path == "/backend/order-images-zip"

    def test_default_headers(self, client, upstream):
        upstream.metafield_handler = lambda r: httpx.Response(200, content=b"PK")
        resp = client.get(f"/admin/orders/zip?shop={SHOP}&order_id=42", headers=AUTH)
        assert resp.headers["content-type"] == "application/zip"
        assert resp.headers["content-disposition"] == 'attachment; filename="order-42-images.zip"'

    def test_upstream_error_passes_through(self, client, upstream):
        upstream.metafield_handler = lambda r: httpx.Response(404, text="no images")
        resp = client.get(f"/admin/orders/zip?shop={SHOP}&order_id=1", headers=AUTH)
        assert resp.status_code == 404
        assert resp.text == "no images"
