"""Friendly, localized labels for raw fulfillment statuses.

Output is a pure function of the raw status and the language selector.
Unknown statuses pass through unchanged so new upstream values still show up.
"""

from enum import Enum


class Lang(str, Enum):
    """Supported output languages."""

    EN = "en"
    PT = "pt"


def parse_lang(value: str | None) -> Lang:
    """Parse a ``lang`` query value; anything not Portuguese means English."""
    if value and value.strip().lower().startswith("pt"):
        return Lang.PT
    return Lang.EN


# Keyed by lowercased raw status; None covers null/missing.
FRIENDLY_STATUS: dict[Lang, dict[str | None, str]] = {
    Lang.EN: {
        None: "Preparing for shipment",
        "unfulfilled": "Preparing for shipment",
        "fulfilled": "Shipped",
        "fully fulfilled": "Delivered",
        "partially fulfilled": "Partially shipped",
        "processing": "Processing",
        "paid": "Payment confirmed",
        "pending": "Pending confirmation",
    },
    Lang.PT: {
        None: "Preparando para envio",
        "unfulfilled": "Preparando para envio",
        "fulfilled": "Enviado",
        "fully fulfilled": "Entregue",
        "partially fulfilled": "Parcialmente enviado",
        "processing": "Em processamento",
        "paid": "Pagamento confirmado",
        "pending": "Aguardando confirmação",
    },
}


def friendly_status(raw: str | None, lang: Lang = Lang.EN) -> str:
    """Translate a raw fulfillment status.

    Args:
        raw: Raw upstream status (any case), or None.
        lang: Output language.

    Returns:
        Friendly label, or ``raw`` unchanged when the status is unknown.
    """
    table = FRIENDLY_STATUS[lang]
    key = raw.strip().lower() if raw and raw.strip() else None
    if key in table:
        return table[key]
    return raw  # type: ignore[return-value]


def is_delivered_like(raw: str | None) -> bool:
    """True when a raw status claims delivery."""
    if not raw:
        return False
    value = raw.strip().lower()
    return "delivered" in value or value == "fully fulfilled"
