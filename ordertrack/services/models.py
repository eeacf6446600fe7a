"""Canonical order and fulfillment models.

Upstream order payloads vary in where they keep emails, numbers and
fulfillments. ``Order.from_raw`` reads every known location and never raises
for missing or oddly typed keys.
"""

from typing import Any

from pydantic import BaseModel, Field


def _text(value: Any) -> str | None:
    """Return a stripped string, or None for empty/non-scalar values."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def _dig(data: Any, *path: str) -> Any:
    """Follow dict keys, returning None as soon as a step is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _first_text(data: dict, *paths: tuple[str, ...]) -> str | None:
    for path in paths:
        value = _text(_dig(data, *path))
        if value is not None:
            return value
    return None


def _as_list(value: Any) -> list:
    """Accept a bare list or a ``{"data": [...]}`` wrapper."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and isinstance(value.get("data"), list):
        return value["data"]
    return []


class Fulfillment(BaseModel):
    """A shipping record attached to an order."""

    status: str | None = Field(None, description="Raw fulfillment/shipment status")
    tracking_number: str | None = Field(None, description="Carrier tracking number")
    tracking_company: str | None = Field(None, description="Claimed carrier name")
    tracking_url: str | None = Field(None, description="Carrier tracking page URL")

    @classmethod
    def from_raw(cls, raw: dict) -> "Fulfillment":
        tracking_url = _text(raw.get("tracking_url"))
        if tracking_url is None:
            urls = raw.get("tracking_urls")
            if isinstance(urls, list) and urls:
                tracking_url = _text(urls[0])
        return cls(
            status=_first_text(raw, ("status",), ("shipment_status",)),
            tracking_number=_first_text(raw, ("tracking_number",), ("tracking_code",)),
            tracking_company=_first_text(raw, ("tracking_company",), ("carrier",)),
            tracking_url=tracking_url,
        )


class Order(BaseModel):
    """Order in canonical form."""

    id: str | None = Field(None, description="Upstream order ID")
    number: str | None = Field(None, description="Human-readable order number")
    created_at: str | None = Field(None, description="Creation timestamp as sent upstream")

    email: str | None = None
    customer_email: str | None = None
    contact_email: str | None = None
    shipping_email: str | None = None
    billing_email: str | None = None

    financial_status: str | None = None
    fulfillment_status: str | None = Field(None, description="Raw fulfillment status")
    fulfillments: list[Fulfillment] = Field(default_factory=list)

    raw: dict[str, Any] = Field(default_factory=dict, description="Original upstream payload")

    @classmethod
    def from_raw(cls, raw: dict) -> "Order":
        """Build an Order from an upstream order dict."""
        fulfillments = [
            Fulfillment.from_raw(item)
            for item in _as_list(raw.get("fulfillments"))
            if isinstance(item, dict)
        ]
        return cls(
            id=_text(raw.get("id")),
            number=_first_text(raw, ("number",), ("order_number",), ("name",)),
            created_at=_text(raw.get("created_at")),
            email=_text(raw.get("email")),
            customer_email=_first_text(
                raw, ("customer", "email"), ("customer", "data", "email")
            ),
            contact_email=_text(raw.get("contact_email")),
            shipping_email=_first_text(
                raw, ("shipping_address", "email"), ("shipping", "email")
            ),
            billing_email=_first_text(
                raw, ("billing_address", "email"), ("billing", "email")
            ),
            financial_status=_text(raw.get("financial_status")),
            fulfillment_status=_text(raw.get("fulfillment_status")),
            fulfillments=fulfillments,
            raw=raw,
        )

    @property
    def emails(self) -> list[str]:
        """All known email addresses, in field order, without blanks."""
        candidates = (
            self.customer_email,
            self.email,
            self.contact_email,
            self.shipping_email,
            self.billing_email,
        )
        return [e for e in candidates if e]

    @property
    def primary_email(self) -> str | None:
        emails = self.emails
        return emails[0] if emails else None

    @property
    def current_fulfillment(self) -> Fulfillment | None:
        """Last fulfillment in arrival order."""
        return self.fulfillments[-1] if self.fulfillments else None

    def matches_email(self, email: str | None) -> bool:
        """Case-insensitive ownership check against every email field."""
        if not email or not email.strip():
            return False
        wanted = email.strip().lower()
        return any(e.strip().lower() == wanted for e in self.emails)

    @property
    def key(self) -> str:
        """Identity used when merging results from several lookups."""
        return self.id or self.number or str(id(self))
