"""Upstream response envelope normalization.

The commerce API has returned order lists in several envelope shapes over
time. Each known shape is an ``EnvelopeKind`` with its own decoder; the
matchers run in priority order and the first hit wins. Anything else
classifies as ``UNKNOWN`` and decodes to an empty list, so callers never see
an exception from schema drift.

Shapes:
    {"order": {...}} / {"data": {...}}        single order
    [...]                                     bare list
    {"orders": {"data": [...], "last_page": N}}  nested paginated
    {"orders": [...]}                         nested list
    {"data": [...]}                           flat data
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ordertrack.services.models import Order


class EnvelopeKind(str, Enum):
    """Closed set of recognised envelope shapes."""

    SINGLE_ORDER = "single_order"
    BARE_LIST = "bare_list"
    NESTED_PAGINATED = "nested_paginated"
    NESTED_LIST = "nested_list"
    FLAT_DATA = "flat_data"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Envelope:
    """A classified upstream payload.

    Attributes:
        kind: Which shape matched.
        items: Raw order dicts extracted from the payload.
        last_page: Pagination hint, when the shape carries one.
    """

    kind: EnvelopeKind
    items: list[dict] = field(default_factory=list)
    last_page: int | None = None


def _dicts(items: list) -> list[dict]:
    return [item for item in items if isinstance(item, dict)]


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _match_single_order(raw: Any) -> Envelope | None:
    if not isinstance(raw, dict):
        return None
    for key in ("order", "data"):
        inner = raw.get(key)
        if isinstance(inner, dict) and not isinstance(inner.get("data"), list):
            return Envelope(EnvelopeKind.SINGLE_ORDER, [inner])
    return None


def _match_bare_list(raw: Any) -> Envelope | None:
    if isinstance(raw, list):
        return Envelope(EnvelopeKind.BARE_LIST, _dicts(raw))
    return None


def _match_nested_paginated(raw: Any) -> Envelope | None:
    if not isinstance(raw, dict):
        return None
    container = raw.get("orders")
    if isinstance(container, dict) and isinstance(container.get("data"), list):
        return Envelope(
            EnvelopeKind.NESTED_PAGINATED,
            _dicts(container["data"]),
            _to_int(container.get("last_page")),
        )
    return None


def _match_nested_list(raw: Any) -> Envelope | None:
    if isinstance(raw, dict) and isinstance(raw.get("orders"), list):
        return Envelope(EnvelopeKind.NESTED_LIST, _dicts(raw["orders"]))
    return None


def _match_flat_data(raw: Any) -> Envelope | None:
    if isinstance(raw, dict) and isinstance(raw.get("data"), list):
        return Envelope(EnvelopeKind.FLAT_DATA, _dicts(raw["data"]))
    return None


_LIST_MATCHERS: tuple[Callable[[Any], Envelope | None], ...] = (
    _match_bare_list,
    _match_nested_paginated,
    _match_nested_list,
    _match_flat_data,
)


def classify_envelope(raw: Any) -> Envelope:
    """Resolve a payload to its envelope kind. Never raises."""
    for matcher in (_match_single_order, *_LIST_MATCHERS):
        envelope = matcher(raw)
        if envelope is not None:
            return envelope
    return Envelope(EnvelopeKind.UNKNOWN)


def unwrap_order(raw: Any) -> Order | None:
    """Extract a single order from a detail response.

    Accepts ``{"order": {...}}``, ``{"data": {...}}`` or a bare order dict.
    Returns None when nothing order-like is present.
    """
    envelope = _match_single_order(raw)
    if envelope is not None:
        return Order.from_raw(envelope.items[0])
    if isinstance(raw, dict) and ("id" in raw or "number" in raw):
        return Order.from_raw(raw)
    return None


def unwrap_orders_list(raw: Any) -> list[Order]:
    """Flatten any list envelope into canonical orders; unknown shapes give []."""
    for matcher in _LIST_MATCHERS:
        envelope = matcher(raw)
        if envelope is not None:
            return [Order.from_raw(item) for item in envelope.items]
    return []


def read_last_page(raw: Any) -> int:
    """Read the pagination hint from a list response, defaulting to 1."""
    if not isinstance(raw, dict):
        return 1
    candidates = (
        ("orders", "last_page"),
        ("last_page",),
        ("meta", "last_page"),
        ("meta", "pagination", "total_pages"),
    )
    for path in candidates:
        current: Any = raw
        for key in path:
            current = current.get(key) if isinstance(current, dict) else None
        number = _to_int(current)
        if number is not None:
            return number
    return 1


def describe_shape(raw: Any) -> dict[str, Any]:
    """Summarize a payload's structure for the diagnostic endpoint."""
    if isinstance(raw, list):
        first = raw[0] if raw else None
        top_level = {
            "type": "array",
            "length": len(raw),
            "keys": sorted(first.keys()) if isinstance(first, dict) else [],
        }
    elif isinstance(raw, dict):
        top_level = {"type": "object", "keys": sorted(raw.keys())}
    else:
        top_level = {"type": type(raw).__name__, "keys": []}

    orders = unwrap_orders_list(raw)
    envelope = classify_envelope(raw)
    return {
        "top_level_shape": top_level,
        "envelope": envelope.kind.value,
        "detected_list_len": len(orders),
        "last_page": read_last_page(raw),
        "first_order_keys": sorted(orders[0].raw.keys()) if orders else [],
    }
