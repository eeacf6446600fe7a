"""Builds service objects from configuration.

The configuration value is created once at process start and passed in
here; services hold no module-level state of their own.
"""

import logging

from ordertrack.cli.config import OrderTrackConfig
from ordertrack.services.audit_engine import AuditEngine
from ordertrack.services.order_locator import OrderLocator
from ordertrack.services.tracking_verifier import TrackingVerifier
from ordertrack.services.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)


def build_upstream_client(config: OrderTrackConfig) -> UpstreamClient:
    upstream = config.upstream
    if not upstream.is_configured:
        logger.warning("Upstream API base or token not configured; requests will fail")
    return UpstreamClient(
        api_base=upstream.api_base,
        token=upstream.token,
        timeout=upstream.timeout_seconds,
    )


def build_locator(config: OrderTrackConfig) -> OrderLocator:
    return OrderLocator(build_upstream_client(config), max_pages=config.upstream.max_pages)


def build_verifier(config: OrderTrackConfig) -> TrackingVerifier:
    return TrackingVerifier(
        shallow_timeout=config.audit.shallow_timeout_seconds,
        deep_timeout=config.audit.deep_timeout_seconds,
        user_agent=config.audit.user_agent,
    )


def build_audit_engine(config: OrderTrackConfig) -> AuditEngine:
    return AuditEngine(build_locator(config), build_verifier(config))
