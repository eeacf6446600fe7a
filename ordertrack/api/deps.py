"""FastAPI dependencies.

Configuration is loaded once per process and injected; tests replace these
through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from ordertrack.cli.config import OrderTrackConfig, load_config
from ordertrack.services.audit_engine import AuditEngine
from ordertrack.services.order_locator import OrderLocator
from ordertrack.services.provider import (
    build_audit_engine,
    build_locator,
    build_upstream_client,
)
from ordertrack.services.upstream_client import UpstreamClient

_TRUE_VALUES = {"1", "true", "yes", "on", "sim"}


@lru_cache(maxsize=1)
def get_config() -> OrderTrackConfig:
    return load_config()


def get_upstream_client(config: OrderTrackConfig = Depends(get_config)) -> UpstreamClient:
    return build_upstream_client(config)


def get_locator(config: OrderTrackConfig = Depends(get_config)) -> OrderLocator:
    return build_locator(config)


def get_audit_engine(config: OrderTrackConfig = Depends(get_config)) -> AuditEngine:
    return build_audit_engine(config)


def parse_flag(value: str | None) -> bool:
    """Interpret a boolean query flag (1/true/yes/on)."""
    return bool(value) and value.strip().lower() in _TRUE_VALUES
