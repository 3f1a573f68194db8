"""
Commerce backend client tests
=============================
Requests are answered by an httpx.MockTransport; nothing leaves the process.
"""

import asyncio
import json

import httpx
import pytest

from storefront.api.schemas.shared.envelope import unwrap_envelope
from storefront.api.services.backend_client import (
    BackendError,
    BackendUnauthorizedError,
    BackendUnavailableError,
    StorefrontBackendClient,
    dedupe_orders,
)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def recorded():
    return []


@pytest.fixture
def client_for(recorded):
    """Client whose transport answers with `handler(request)`"""

    def _make(handler):
        def _record(request: httpx.Request):
            recorded.append(request)
            return handler(request)

        return StorefrontBackendClient(base_url="http://backend.test", transport=httpx.MockTransport(_record))

    return _make


# ═══════════════════════════════════════════════════════════
# ENVELOPES
# ═══════════════════════════════════════════════════════════

class TestEnvelope:

    def test_wrapped(self):
        assert unwrap_envelope({"success": True, "data": {"orders": [1]}}, "orders") == [1]

    def test_legacy_unwrapped(self):
        assert unwrap_envelope({"orders": [1]}, "orders") == [1]

    def test_data_is_the_entity(self):
        assert unwrap_envelope({"success": True, "data": {"id": "p1"}}, "product") == {"id": "p1"}


# ═══════════════════════════════════════════════════════════
# REQUESTS
# ═══════════════════════════════════════════════════════════

class TestBackendClient:

    def test_get_product_normalizes_payload(self, client_for):
        client = client_for(lambda request: httpx.Response(200, json={
            "success": True,
            "data": {"product": {
                "_id": "abc",
                "name": "Abaya",
                "price": 250,
                "images": [{"url": "/a.jpg"}],
                "category": "cat-1",
                "variantCombinations": None,
            }},
        }))
        product = run(client.get_product("abaya"))

        assert product.id == "abc"
        assert product.name_ar == "Abaya"
        assert product.image == "/a.jpg"
        assert product.variant_combinations == []

    def test_forwards_token_and_csrf(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(200, json={"success": True}))
        run(client.change_password("tok", "csrf-1", "Old!Pass1", "New!Pass2"))

        request = recorded[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/auth/password"
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.headers["X-CSRF-Token"] == "csrf-1"
        assert "x-correlation-id" in request.headers
        assert json.loads(request.content)["newPassword"] == "New!Pass2"

    def test_401_raises_unauthorized(self, client_for):
        client = client_for(lambda request: httpx.Response(401, json={"error": "expired"}))
        with pytest.raises(BackendUnauthorizedError):
            run(client.list_orders("tok"))

    def test_error_carries_backend_message(self, client_for):
        client = client_for(lambda request: httpx.Response(400, json={"error": "New password must be different"}))
        with pytest.raises(BackendError) as exc_info:
            run(client.change_password("tok", "csrf", "a", "b"))

        assert exc_info.value.status_code == 400
        assert "different" in exc_info.value.message

    def test_network_failure_is_not_retried(self, client_for, recorded):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = client_for(handler)
        with pytest.raises(BackendUnavailableError):
            run(client.list_reviews())
        assert len(recorded) == 1

    def test_orders_are_deduplicated(self, client_for):
        client = client_for(lambda request: httpx.Response(200, json={"orders": [
            {"id": "o1"}, {"id": "o1"}, {"orderNumber": "N-2"},
        ]}))
        assert run(client.list_orders("tok")) == [{"id": "o1"}, {"orderNumber": "N-2"}]

    def test_invoice_request(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(
            200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"},
        ))
        content, content_type = run(client.download_invoice("tok", "o1", "ar"))

        assert content == b"%PDF-1.4"
        assert content_type == "application/pdf"
        assert recorded[0].url.params["format"] == "pdf"
        assert recorded[0].url.params["lang"] == "ar"

    def test_admin_users_updated_with_put(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(200, json={"success": True, "data": {"user": {"id": "u1"}}}))
        assert run(client.admin_update("users", "u1", "tok", "csrf", {"role": "ADMIN"})) == {"id": "u1"}
        assert recorded[0].method == "PUT"

        run(client.admin_update("categories", "c1", "tok", "csrf", {"name": "Dresses"}))
        assert recorded[1].method == "PATCH"

    def test_admin_force_delete(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(200, json={"success": True}))
        run(client.admin_delete("products", "p1", "tok", "csrf", force=True))
        assert recorded[0].url.params["force"] == "true"

    def test_unknown_admin_resource(self, client_for):
        client = client_for(lambda request: httpx.Response(200, json={}))
        with pytest.raises(ValueError):
            run(client.admin_list("orders", "tok"))


def test_dedupe_orders_keeps_first():
    orders = [{"id": "1", "total": 10}, {"id": "1", "total": 99}]
    assert dedupe_orders(orders) == [{"id": "1", "total": 10}]


class TestPathSegments:

    def test_slug_cannot_escape_products_path(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(200, json={"product": {"_id": "p1", "name": "Abaya", "price": 250}}))
        run(client.get_product("../admin/users"))

        assert recorded[0].url.raw_path == b"/api/products/..%2Fadmin%2Fusers"

    def test_admin_entity_id_quoted(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(200, json={"success": True}))
        run(client.admin_delete("reviews", "r1/../../users/u1", "tok", "csrf"))

        assert recorded[0].url.raw_path.startswith(b"/api/admin/reviews/r1%2F..%2F..%2Fusers%2Fu1")

    def test_order_id_quoted(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(200, content=b"%PDF", headers={"content-type": "application/pdf"}))
        run(client.download_invoice("tok", "o1?format=csv", "en"))

        assert recorded[0].url.raw_path.startswith(b"/api/account/orders/o1%3Fformat%3Dcsv/invoice?")

    def test_dot_segment_slug_encoded(self, client_for, recorded):
        client = client_for(lambda request: httpx.Response(200, json={"product": {"_id": "p1", "name": "Abaya", "price": 250}}))
        run(client.get_product(".."))

        assert recorded[0].url.raw_path == b"/api/products/%2E%2E"
