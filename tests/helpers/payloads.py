"""Builders for raw upstream order payloads."""

from typing import Any


def make_fulfillment(
    tracking_number: str | None = "1Z999AA10123456784",
    tracking_company: str | None = "UPS",
    tracking_url: str | None = "https://www.ups.com/track?tracknum=1Z999AA10123456784",
    status: str | None = "success",
) -> dict[str, Any]:
    """Raw upstream fulfillment dict."""
    return {
        "status": status,
        "tracking_number": tracking_number,
        "tracking_company": tracking_company,
        "tracking_url": tracking_url,
    }


def make_order(
    order_id: int | str = 1001,
    number: str | None = None,
    email: str = "maria@example.com",
    fulfillment_status: str | None = "fulfilled",
    fulfillments: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Raw upstream order dict."""
    payload: dict[str, Any] = {
        "id": order_id,
        "number": number or str(order_id),
        "created_at": "2024-05-01T10:00:00Z",
        "customer": {"email": email},
        "financial_status": "paid",
        "fulfillment_status": fulfillment_status,
        "fulfillments": fulfillments if fulfillments is not None else [],
    }
    payload.update(extra)
    return payload
