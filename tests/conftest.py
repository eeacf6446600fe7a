"""Root-level pytest fixtures for all tests."""

import os

import pytest

from tests.helpers import FakeUpstreamClient


def pytest_configure(config):
    """Register custom markers and keep config discovery hermetic."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external services"
    )
    # Keep a developer's env from leaking into config-dependent tests.
    for name in ("SHOP", "API_TOKEN", "API_BASE_URL", "ALLOWED_ORIGINS", "ORDERTRACK_CONFIG_PATH"):
        os.environ.pop(name, None)


@pytest.fixture
def upstream() -> FakeUpstreamClient:
    """Fresh fake upstream per test."""
    return FakeUpstreamClient()
