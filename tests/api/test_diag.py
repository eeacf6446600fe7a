"""Tests for the upstream diagnostics routes."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from ordertrack.errors import UpstreamUnavailableError
from ordertrack.services.upstream_client import RawResponse


@pytest.fixture
def raw_client(override_upstream_client):
    fake = MagicMock()
    fake.get_raw = AsyncMock()
    override_upstream_client(fake)
    return fake


def _json_response(payload, status: int = 200) -> RawResponse:
    return RawResponse(
        status=status,
        ok=200 <= status < 300,
        content_type="application/json",
        text=json.dumps(payload),
    )


class TestOrdersRaw:
    def test_mirrors_upstream_status(self, client, raw_client):
        raw_client.get_raw.return_value = RawResponse(
            status=401, ok=False, content_type="application/json", text='{"error":"unauthorized"}'
        )

        response = client.get("/api/_diag/orders_raw", params={"page": "3"})

        assert response.status_code == 401
        body = response.json()
        assert body == {
            "ok": False,
            "status": 401,
            "contentType": "application/json",
            "sample": '{"error":"unauthorized"}',
        }
        raw_client.get_raw.assert_awaited_once_with("/orders", {"page": "3"})

    def test_sample_is_truncated(self, client, raw_client):
        raw_client.get_raw.return_value = RawResponse(
            status=200, ok=True, content_type="text/plain", text="x" * 5000
        )

        body = client.get("/api/_diag/orders_raw").json()
        assert len(body["sample"]) == 2000

    def test_network_failure_is_500(self, client, raw_client):
        raw_client.get_raw.side_effect = UpstreamUnavailableError("connection refused")

        response = client.get("/api/_diag/orders_raw")
        assert response.status_code == 500


class TestOrdersShape:
    def test_describes_nested_paginated_envelope(self, client, raw_client):
        raw_client.get_raw.return_value = _json_response(
            {"orders": {"data": [{"id": 1, "number": "1001"}], "last_page": 4}}
        )

        body = client.get("/api/_diag/orders_shape").json()

        assert body["ok"] is True
        assert body["envelope"] == "nested_paginated"
        assert body["detected_list_len"] == 1
        assert body["last_page"] == 4
        assert body["first_order_keys"] == ["id", "number"]

    def test_upstream_error_status_is_mirrored(self, client, raw_client):
        raw_client.get_raw.return_value = _json_response({"error": "nope"}, status=403)

        response = client.get("/api/_diag/orders_shape")

        assert response.status_code == 403
        assert response.json()["ok"] is False

    def test_non_json_body_is_502(self, client, raw_client):
        raw_client.get_raw.return_value = RawResponse(
            status=200, ok=True, content_type="text/html", text="<html></html>"
        )

        response = client.get("/api/_diag/orders_shape")
        assert response.status_code == 502
