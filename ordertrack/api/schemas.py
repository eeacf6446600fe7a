"""Pydantic schemas for API responses.

Defines the order summary payload shared by the order lookup endpoints.
"""

from typing import Any

from pydantic import BaseModel, Field

from ordertrack.services.carrier_validator import (
    carrier_mismatch,
    detect_carrier_by_number,
    normalize_carrier,
)
from ordertrack.services.models import Order
from ordertrack.services.status_translator import Lang, friendly_status


class TrackingInfo(BaseModel):
    """Tracking details of an order's current (last) fulfillment."""

    status: str | None = None
    tracking_number: str | None = None
    tracking_company: str | None = None
    tracking_url: str | None = None
    carrier_detected: str | None = None
    carrier_claimed: str | None = None
    carrier_mismatch: bool = False


class OrderSummaryResponse(BaseModel):
    """Order as returned by the lookup endpoints."""

    order_id: str | None = None
    order_number: str | None = None
    created_at: str | None = None
    financial_status: str | None = None
    fulfillment_status: str | None = None
    friendly_status: str | None = None
    fulfillment_count: int = 0
    tracking: TrackingInfo | None = None
    raw: dict[str, Any] | None = Field(None, description="Upstream payload, debug only")

    @classmethod
    def from_order(
        cls, order: Order, lang: Lang = Lang.EN, debug: bool = False
    ) -> "OrderSummaryResponse":
        current = order.current_fulfillment
        tracking = None
        if current is not None:
            detected = detect_carrier_by_number(current.tracking_number)
            claimed = normalize_carrier(current.tracking_company)
            tracking = TrackingInfo(
                status=current.status,
                tracking_number=current.tracking_number,
                tracking_company=current.tracking_company,
                tracking_url=current.tracking_url,
                carrier_detected=detected,
                carrier_claimed=claimed,
                carrier_mismatch=carrier_mismatch(detected, claimed),
            )
        return cls(
            order_id=order.id,
            order_number=order.number,
            created_at=order.created_at,
            financial_status=order.financial_status,
            fulfillment_status=order.fulfillment_status,
            friendly_status=friendly_status(order.fulfillment_status, lang),
            fulfillment_count=len(order.fulfillments),
            tracking=tracking,
            raw=order.raw if debug else None,
        )


class OrderListResponse(BaseModel):
    """All orders matching an email."""

    email: str
    count: int
    orders: list[OrderSummaryResponse]


class ErrorResponse(BaseModel):
    """Body of every domain error response."""

    error: str
    error_code: str
    detail: str
