"""Tests for the commerce API client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ordertrack.errors import UpstreamUnavailableError
from ordertrack.services.outcomes import FailureKind
from ordertrack.services.upstream_client import UpstreamClient


@pytest.fixture
def client():
    return UpstreamClient("https://api.example.com/v2/my-shop/", "tok_secret")


def _response(status_code: int, json_body=None, text: str = "", content_type="application/json"):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_body
    response.text = text
    response.headers = {"content-type": content_type}
    return response


class TestTryGetJson:
    @pytest.mark.asyncio
    async def test_success_sends_bearer_auth(self, client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(200, {"data": []})
            outcome = await client.try_get_json("/orders", {"page": 2})

        assert outcome.ok is True
        assert outcome.value == {"data": []}
        args, kwargs = mock_get.call_args
        assert args[0] == "https://api.example.com/v2/my-shop/orders"
        assert kwargs["headers"]["Authorization"] == "Bearer tok_secret"
        assert kwargs["params"] == {"page": 2}

    @pytest.mark.asyncio
    async def test_non_2xx(self, client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(401, {"error": "unauthorized"})
            outcome = await client.try_get_json("/orders")

        assert outcome.ok is False
        assert outcome.failure == FailureKind.HTTP_ERROR
        assert outcome.status == 401

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ReadTimeout("read timed out")
            outcome = await client.try_get_json("/orders")

        assert outcome.failure == FailureKind.TIMEOUT
        assert outcome.status == 0

    @pytest.mark.asyncio
    async def test_network_error(self, client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ConnectError("connection refused")
            outcome = await client.try_get_json("/orders")

        assert outcome.failure == FailureKind.NETWORK_ERROR
        assert "connection refused" in outcome.detail

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        response = _response(200)
        response.json.side_effect = ValueError("Expecting value")
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = response
            outcome = await client.try_get_json("/orders")

        assert outcome.failure == FailureKind.INVALID_PAYLOAD


class TestGetJson:
    @pytest.mark.asyncio
    async def test_raises_with_status(self, client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(503)
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.get_json("/orders")

        assert exc_info.value.status == 503
        assert exc_info.value.http_status == 500
        assert "HTTP 503" in exc_info.value.message


class TestGetRaw:
    @pytest.mark.asyncio
    async def test_returns_non_2xx_without_raising(self, client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(404, text="<html>nope</html>", content_type="text/html")
            raw = await client.get_raw("/orders", {"page": 1})

        assert raw.status == 404
        assert raw.ok is False
        assert raw.content_type == "text/html"
        assert raw.text == "<html>nope</html>"

    @pytest.mark.asyncio
    async def test_network_failure_raises(self, client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ConnectError("dns failure")
            with pytest.raises(UpstreamUnavailableError):
                await client.get_raw("/orders")


def test_api_base_strips_trailing_slash(client):
    assert client.api_base == "https://api.example.com/v2/my-shop"
