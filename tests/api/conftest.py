"""Pytest fixtures for API tests.

Provides a TestClient wired to an in-memory upstream and a canned
tracking verifier through ``app.dependency_overrides``.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from ordertrack.api.deps import get_audit_engine, get_config, get_locator, get_upstream_client
from ordertrack.api.main import app
from ordertrack.cli.config import AuditConfig, OrderTrackConfig, UpstreamConfig
from ordertrack.services.audit_engine import AuditEngine
from ordertrack.services.order_locator import OrderLocator
from tests.helpers import FakeUpstreamClient, FakeVerifier


@pytest.fixture
def test_config() -> OrderTrackConfig:
    return OrderTrackConfig(
        upstream=UpstreamConfig(
            base_url="https://api.example.com/v2/{shop}",
            shop="demo",
            token="tok_test",
        ),
        audit=AuditConfig(sample_size=20),
    )


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def client(
    upstream: FakeUpstreamClient,
    verifier: FakeVerifier,
    test_config: OrderTrackConfig,
) -> Generator[TestClient, None, None]:
    """TestClient whose services talk to the fake upstream.

    Args:
        upstream: In-memory commerce API.
        verifier: Canned tracking verifier.
        test_config: Configuration served to routes.

    Yields:
        TestClient configured for testing.
    """
    app.dependency_overrides[get_config] = lambda: test_config
    app.dependency_overrides[get_locator] = lambda: OrderLocator(upstream)
    app.dependency_overrides[get_audit_engine] = lambda: AuditEngine(OrderLocator(upstream), verifier)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def override_upstream_client():
    """Install a replacement for the raw upstream client used by diagnostics."""

    def _install(fake) -> None:
        app.dependency_overrides[get_upstream_client] = lambda: fake

    yield _install
    app.dependency_overrides.pop(get_upstream_client, None)
