"""Test helper utilities."""

from tests.helpers.fake_upstream import FakeUpstreamClient
from tests.helpers.fake_verifier import FakeVerifier
from tests.helpers.payloads import make_fulfillment, make_order

__all__ = [
    "FakeUpstreamClient",
    "FakeVerifier",
    "make_fulfillment",
    "make_order",
]
