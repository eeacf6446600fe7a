"""Tests for the customer-facing order lookup routes."""

from unittest.mock import AsyncMock, MagicMock

from ordertrack.api.deps import get_locator
from ordertrack.api.main import app
from ordertrack.errors import UpstreamUnavailableError
from tests.helpers import make_fulfillment, make_order

EMAIL = "maria@example.com"


def _register_email(upstream, *orders):
    upstream.add("/orders", {"data": list(orders)}, {"search": EMAIL})


class TestOrderByEmail:
    def test_returns_first_match_with_tracking(self, client, upstream):
        _register_email(
            upstream,
            make_order(10, fulfillments=[make_fulfillment(tracking_company="fedex")]),
            make_order(11),
        )

        response = client.get("/api/order-by-email", params={"email": EMAIL})

        assert response.status_code == 200
        body = response.json()
        assert body["order_id"] == "10"
        assert body["friendly_status"] == "Shipped"
        assert body["fulfillment_count"] == 1
        assert body["tracking"]["carrier_detected"] == "UPS"
        assert body["tracking"]["carrier_claimed"] == "FedEx"
        assert body["tracking"]["carrier_mismatch"] is True
        assert "raw" not in body

    def test_debug_includes_raw_payload(self, client, upstream):
        _register_email(upstream, make_order(10))

        body = client.get("/api/order-by-email", params={"email": EMAIL, "debug": "1"}).json()
        assert body["raw"]["id"] == 10

    def test_portuguese(self, client, upstream):
        _register_email(upstream, make_order(10))

        body = client.get("/api/order-by-email", params={"email": EMAIL, "lang": "pt"}).json()
        assert body["friendly_status"] == "Enviado"

    def test_no_fulfillment_has_no_tracking(self, client, upstream):
        _register_email(upstream, make_order(10, fulfillment_status=None))

        body = client.get("/api/order-by-email", params={"email": EMAIL}).json()
        assert "tracking" not in body
        assert body["friendly_status"] == "Preparing for shipment"

    def test_missing_email_is_400(self, client):
        response = client.get("/api/order-by-email")

        assert response.status_code == 400
        assert response.json()["error_code"] == "E-1001"

    def test_unknown_email_is_404(self, client, upstream):
        upstream.add_pages([[make_order(1, email="x@example.com")]])

        response = client.get("/api/order-by-email", params={"email": EMAIL})

        assert response.status_code == 404
        assert response.json()["error_code"] == "E-2002"

    def test_upstream_failure_is_500(self, client):
        locator = MagicMock()
        locator.list_orders_robust = AsyncMock(side_effect=UpstreamUnavailableError("HTTP 502"))
        app.dependency_overrides[get_locator] = lambda: locator

        response = client.get("/api/order-by-email", params={"email": EMAIL})

        assert response.status_code == 500
        assert response.json()["error_code"] == "E-3001"


class TestOrderStatus:
    def test_owner_gets_order(self, client, upstream):
        upstream.add("/orders/77", {"order": make_order(77, email=EMAIL)})

        response = client.get("/api/order-status", params={"order_id": "77", "email": "MARIA@example.com"})

        assert response.status_code == 200
        assert response.json()["order_id"] == "77"

    def test_email_mismatch_is_403(self, client, upstream):
        upstream.add("/orders/77", {"order": make_order(77, email="other@example.com")})

        response = client.get("/api/order-status", params={"order_id": "77", "email": EMAIL})

        assert response.status_code == 403
        assert response.json()["error_code"] == "E-2001"

    def test_bypass_email(self, client, upstream):
        upstream.add("/orders/77", {"order": make_order(77, email="other@example.com")})

        response = client.get("/api/order-status", params={"order_id": "77", "bypass_email": "1"})
        assert response.status_code == 200

    def test_missing_order_id_is_400(self, client):
        response = client.get("/api/order-status", params={"email": EMAIL})
        assert response.status_code == 400

    def test_missing_email_is_400(self, client):
        response = client.get("/api/order-status", params={"order_id": "77"})
        assert response.status_code == 400
        assert "email" in response.json()["detail"]

    def test_not_found_is_404(self, client):
        response = client.get("/api/order-status", params={"order_id": "#404", "email": EMAIL})
        assert response.status_code == 404


class TestOrdersByEmail:
    def test_lists_all_matches(self, client, upstream):
        _register_email(upstream, make_order(1), make_order(2))

        body = client.get("/api/orders-by-email", params={"email": EMAIL}).json()

        assert body["email"] == EMAIL
        assert body["count"] == 2
        assert [o["order_id"] for o in body["orders"]] == ["1", "2"]

    def test_no_matches_is_empty_list(self, client):
        body = client.get("/api/orders-by-email", params={"email": EMAIL}).json()
        assert body["count"] == 0
        assert body["orders"] == []


class TestFindAndStatus:
    def test_with_order_id(self, client, upstream):
        upstream.add("/orders/5", {"order": make_order(5)})

        body = client.get("/api/find-and-status", params={"email": EMAIL, "order_id": "5"}).json()
        assert body["order_id"] == "5"

    def test_with_order_id_wrong_owner(self, client, upstream):
        upstream.add("/orders/5", {"order": make_order(5, email="other@example.com")})

        response = client.get("/api/find-and-status", params={"email": EMAIL, "order_id": "5"})
        assert response.status_code == 403

    def test_without_order_id_uses_email(self, client, upstream):
        _register_email(upstream, make_order(8))

        body = client.get("/api/find-and-status", params={"email": EMAIL}).json()
        assert body["order_id"] == "8"

    def test_missing_email_is_400(self, client):
        assert client.get("/api/find-and-status", params={"order_id": "5"}).status_code == 400
