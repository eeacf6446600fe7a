"""Tests for the app shell: health, root and error rendering."""

from ordertrack.api.deps import parse_flag
from ordertrack.api.main import app
from ordertrack.cli.config import OrderTrackConfig, ServerConfig


def test_health_reports_configured_shop(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["shop_configured"] is True
    assert "version" in body


def test_health_unconfigured(client, test_config):
    test_config.upstream.token = ""
    assert client.get("/health").json()["shop_configured"] is False


def test_root(client):
    assert client.get("/").json()["docs"] == "/docs"


def test_domain_error_body_shape(client):
    body = client.get("/api/orders-by-email").json()
    assert set(body) == {"error", "error_code", "detail"}
    assert body["error"] == "Missing Parameter"


def test_allowed_origins_parsed_from_csv():
    config = OrderTrackConfig(
        server=ServerConfig(allowed_origins="http://localhost:5173, https://shop.example.com ,")
    )
    assert config.server.allowed_origins == [
        "http://localhost:5173",
        "https://shop.example.com",
    ]


def test_parse_flag():
    for value in ("1", "true", "YES", "on", "sim"):
        assert parse_flag(value) is True
    for value in (None, "", "0", "false", "no"):
        assert parse_flag(value) is False


def test_openapi_documents_error_bodies():
    schema = app.openapi()

    assert "ErrorResponse" in schema["components"]["schemas"]
    for path in ("/api/order-status", "/api/orders-by-email", "/api/order-by-email", "/api/find-and-status"):
        responses = schema["paths"][path]["get"]["responses"]
        for status in ("400", "403", "404", "500"):
            assert responses[status]["content"]["application/json"]["schema"] == {
                "$ref": "#/components/schemas/ErrorResponse"
            }
    audit = schema["paths"]["/api/audit-shipments"]["get"]["responses"]
    assert "500" in audit
