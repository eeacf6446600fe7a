"""Carrier detection from tracking numbers and carrier-name normalization.

Number heuristics are tried in order and the first match wins:

    UPS       1Z + 16 alphanumerics
    USPS      20-22 digits
    FedEx     exactly 12, 15 or 20 digits
    Correios  2 letters + 9 digits + BR

FedEx's 20-digit form overlaps USPS; USPS is checked first and wins the tie.
"""

import re
from enum import Enum


class Carrier(str, Enum):
    """Carriers the validator knows by name."""

    USPS = "USPS"
    UPS = "UPS"
    FEDEX = "FedEx"
    CORREIOS = "Correios"
    DHL = "DHL"


CARRIER_NUMBER_PATTERNS: tuple[tuple[Carrier, re.Pattern[str]], ...] = (
    (Carrier.UPS, re.compile(r"^1Z[0-9A-Z]{16}$")),
    (Carrier.USPS, re.compile(r"^\d{20,22}$")),
    (Carrier.FEDEX, re.compile(r"^(?:\d{12}|\d{15}|\d{20})$")),
    (Carrier.CORREIOS, re.compile(r"^[A-Z]{2}\d{9}BR$")),
)

# USPS before UPS: "usps" contains "ups".
_CARRIER_NAME_KEYS: tuple[tuple[str, Carrier], ...] = (
    ("usps", Carrier.USPS),
    ("ups", Carrier.UPS),
    ("fedex", Carrier.FEDEX),
    ("correios", Carrier.CORREIOS),
    ("dhl", Carrier.DHL),
)

_SEPARATORS = re.compile(r"[\s-]+")


def clean_tracking_number(number: str | None) -> str:
    """Drop whitespace and hyphens, upper-case the rest."""
    if not number:
        return ""
    return _SEPARATORS.sub("", number).upper()


def detect_carrier_by_number(number: str | None) -> str | None:
    """Detect the carrier from a tracking number pattern.

    Returns:
        Carrier display name, or None when no heuristic matches.
    """
    cleaned = clean_tracking_number(number)
    if not cleaned:
        return None
    for carrier, pattern in CARRIER_NUMBER_PATTERNS:
        if pattern.match(cleaned):
            return carrier.value
    return None


def normalize_carrier(claimed: str | None) -> str | None:
    """Map a claimed carrier name to its canonical form.

    Matching is a case-insensitive substring check, so "UPS Ground" and
    "ups" both give "UPS". Unrecognized names are returned trimmed but
    otherwise verbatim.
    """
    if not claimed or not claimed.strip():
        return None
    value = claimed.strip()
    lowered = value.lower()
    for key, carrier in _CARRIER_NAME_KEYS:
        if key in lowered:
            return carrier.value
    return value


def carrier_mismatch(detected: str | None, claimed: str | None) -> bool:
    """True only when both carriers are known and disagree."""
    detected_name = normalize_carrier(detected)
    claimed_name = normalize_carrier(claimed)
    if detected_name is None or claimed_name is None:
        return False
    return detected_name.lower() != claimed_name.lower()
