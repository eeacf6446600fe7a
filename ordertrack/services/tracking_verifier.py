"""Tracking URL reachability and tracking-page content checks.

Two levels of verification:

- Shallow: HEAD the tracking URL (GET fallback) and report reachability.
- Deep: GET the page, normalize its text and match carrier-specific
  phrases to decide whether the page shows a real shipment and which
  state it is in.

Each check runs under one overall deadline. Neither check ever raises:
timeouts, network failures and missed deadlines come back as negative
results so an audit always completes.
"""

import asyncio
import logging
import re
from dataclasses import dataclass

import httpx

from ordertrack.services.carrier_validator import Carrier, normalize_carrier
from ordertrack.services.status_translator import is_delivered_like

logger = logging.getLogger(__name__)

SHALLOW_TIMEOUT_SECONDS = 8.0
DEEP_TIMEOUT_SECONDS = 12.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; ordertrack/0.1; +tracking-audit)"

_WHITESPACE = re.compile(r"\s+")

DELIVERED = "Delivered"
OUT_FOR_DELIVERY = "Out for Delivery"
IN_TRANSIT = "In Transit"
PRE_TRANSIT = "Pre-Transit"
PRE_SHIPMENT = "Pre-Shipment"
PROCESSED = "Processed"


@dataclass(frozen=True)
class UrlCheck:
    """Shallow check result. ``status`` is 0 when no response arrived."""

    ok: bool
    status: int


@dataclass(frozen=True)
class PageCheck:
    """Deep check result."""

    page_valid: bool
    detected_status: str | None
    http_status: int = 0


@dataclass(frozen=True)
class CarrierPageRules:
    """Phrases that classify a carrier's tracking page.

    Attributes:
        invalid_markers: Any of these means "no result"; checked first.
        status_markers: (phrase, label) pairs in priority order.
    """

    invalid_markers: tuple[str, ...]
    status_markers: tuple[tuple[str, str], ...] = ()


GENERIC_RULES = CarrierPageRules(
    invalid_markers=(
        "not found",
        "no results",
        "invalid tracking",
        "could not be found",
        "não encontrado",
        "não encontramos",
    ),
)

CARRIER_RULES: dict[str, CarrierPageRules] = {
    Carrier.UPS.value: CarrierPageRules(
        invalid_markers=(
            "could not locate the shipment details",
            "tracking number not found",
            "invalid tracking number",
        ),
        status_markers=(
            ("delivered", DELIVERED),
            ("out for delivery", OUT_FOR_DELIVERY),
            ("in transit", IN_TRANSIT),
            ("on the way", IN_TRANSIT),
            ("label created", PRE_TRANSIT),
            ("shipper created a label", PRE_TRANSIT),
        ),
    ),
    Carrier.USPS.value: CarrierPageRules(
        invalid_markers=(
            "status not available",
            "could not locate the tracking information",
        ),
        status_markers=(
            ("delivered", DELIVERED),
            ("out for delivery", OUT_FOR_DELIVERY),
            ("in transit", IN_TRANSIT),
            ("arrived at usps", IN_TRANSIT),
            ("pre-shipment", PRE_SHIPMENT),
            ("shipping label created", PRE_SHIPMENT),
        ),
    ),
    Carrier.FEDEX.value: CarrierPageRules(
        invalid_markers=(
            "no record of this tracking number",
            "cannot locate",
            "tracking number not found",
        ),
        status_markers=(
            ("delivered", DELIVERED),
            ("on fedex vehicle for delivery", OUT_FOR_DELIVERY),
            ("out for delivery", OUT_FOR_DELIVERY),
            ("in transit", IN_TRANSIT),
            ("label created", PRE_TRANSIT),
            ("shipment information sent to fedex", PRE_TRANSIT),
        ),
    ),
    Carrier.CORREIOS.value: CarrierPageRules(
        invalid_markers=(
            "objeto não encontrado",
            "código de objeto inválido",
            "não foi possível localizar",
        ),
        status_markers=(
            ("objeto entregue", DELIVERED),
            ("saiu para entrega", OUT_FOR_DELIVERY),
            ("em trânsito", IN_TRANSIT),
            ("encaminhado", IN_TRANSIT),
            ("objeto postado", PROCESSED),
        ),
    ),
    Carrier.DHL.value: CarrierPageRules(
        invalid_markers=(
            "no result found",
            "shipment could not be found",
        ),
        status_markers=(
            ("delivered", DELIVERED),
            ("with delivery courier", OUT_FOR_DELIVERY),
            ("out for delivery", OUT_FOR_DELIVERY),
            ("in transit", IN_TRANSIT),
            ("shipment information received", PROCESSED),
        ),
    ),
}


def normalize_page_text(text: str | None) -> str:
    """Lowercase and collapse whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip().lower()


def rules_for(carrier: str | None) -> CarrierPageRules:
    name = normalize_carrier(carrier)
    if name is None:
        return GENERIC_RULES
    return CARRIER_RULES.get(name, GENERIC_RULES)


def classify_page(carrier: str | None, text: str | None) -> PageCheck:
    """Classify tracking-page text with the carrier's rule set.

    Returns:
        PageCheck without an HTTP status; empty text is never valid.
    """
    normalized = normalize_page_text(text)
    if not normalized:
        return PageCheck(page_valid=False, detected_status=None)

    rules = rules_for(carrier)
    if any(marker in normalized for marker in rules.invalid_markers):
        return PageCheck(page_valid=False, detected_status=None)

    for phrase, label in rules.status_markers:
        if phrase in normalized:
            return PageCheck(page_valid=True, detected_status=label)
    return PageCheck(page_valid=True, detected_status=None)


def status_indicates_delivery(label: str | None) -> bool:
    return bool(label) and "delivered" in label.lower()


def derive_status_conflict(reported_delivered: bool, page: PageCheck | None) -> bool:
    """Dispute between the store's delivery claim and the carrier page.

    Args:
        reported_delivered: Whether the upstream status is delivery-like.
        page: Deep check result; None when no deep check ran.
    """
    if not reported_delivered or page is None:
        return False
    if not page.page_valid:
        return True
    return page.detected_status is not None and not status_indicates_delivery(
        page.detected_status
    )


def status_conflict(reported_status: str | None, page: PageCheck | None) -> bool:
    """``derive_status_conflict`` for a raw upstream status string."""
    return derive_status_conflict(is_delivered_like(reported_status), page)


class TrackingVerifier:
    """Runs shallow and deep checks against carrier tracking pages.

    Example:
        verifier = TrackingVerifier()
        check = await verifier.check_tracking_url("https://www.ups.com/track?tracknum=1Z...")
        page = await verifier.deep_tracking_check("UPS", "https://www.ups.com/track?...")
    """

    def __init__(
        self,
        shallow_timeout: float = SHALLOW_TIMEOUT_SECONDS,
        deep_timeout: float = DEEP_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.shallow_timeout = shallow_timeout
        self.deep_timeout = deep_timeout
        self.user_agent = user_agent

    def _get_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "text/html,*/*"}

    async def _head_then_get(self, url: str) -> UrlCheck:
        async with httpx.AsyncClient(
            timeout=self.shallow_timeout,
            follow_redirects=True,
            headers=self._get_headers(),
        ) as client:
            response = await client.head(url)
            status = response.status_code
            if 200 <= status < 300:
                return UrlCheck(ok=True, status=status)
            response = await client.get(url)
            status = response.status_code
            return UrlCheck(ok=200 <= status < 300, status=status)

    async def check_tracking_url(self, url: str | None) -> UrlCheck:
        """HEAD the URL, retrying once with GET when HEAD is refused.

        HEAD and the GET retry share one ``shallow_timeout`` deadline.

        Returns:
            UrlCheck(ok, status); UrlCheck(False, 0) on network failure or
            when the deadline passes.
        """
        if not url:
            return UrlCheck(ok=False, status=0)
        try:
            return await asyncio.wait_for(self._head_then_get(url), timeout=self.shallow_timeout)
        except asyncio.TimeoutError:
            logger.info("Tracking URL check exceeded %.1fs: %s", self.shallow_timeout, url)
            return UrlCheck(ok=False, status=0)
        except httpx.HTTPError as e:
            logger.info("Tracking URL unreachable %s: %s", url, type(e).__name__)
            return UrlCheck(ok=False, status=0)

    async def _get_page(self, url: str) -> tuple[int, str | None]:
        async with httpx.AsyncClient(
            timeout=self.deep_timeout,
            follow_redirects=True,
            headers=self._get_headers(),
        ) as client:
            response = await client.get(url)
        if not 200 <= response.status_code < 300:
            return response.status_code, None
        return response.status_code, response.text

    async def fetch_page_text(self, url: str) -> tuple[int, str | None]:
        """GET a tracking page within ``deep_timeout``.

        Returns:
            (status, text); text is None on failure, non-2xx or deadline.
        """
        try:
            return await asyncio.wait_for(self._get_page(url), timeout=self.deep_timeout)
        except asyncio.TimeoutError:
            logger.info("Tracking page fetch exceeded %.1fs: %s", self.deep_timeout, url)
            return 0, None
        except httpx.HTTPError as e:
            logger.info("Tracking page fetch failed %s: %s", url, type(e).__name__)
            return 0, None

    async def deep_tracking_check(self, carrier: str | None, url: str | None) -> PageCheck:
        """Fetch and parse the carrier tracking page.

        Args:
            carrier: Detected or claimed carrier; selects the rule set.
            url: Tracking page URL.

        Returns:
            PageCheck; page_valid is False when the fetch fails.
        """
        if not url:
            return PageCheck(page_valid=False, detected_status=None)
        http_status, text = await self.fetch_page_text(url)
        if text is None:
            return PageCheck(page_valid=False, detected_status=None, http_status=http_status)
        page = classify_page(carrier, text)
        return PageCheck(
            page_valid=page.page_valid,
            detected_status=page.detected_status,
            http_status=http_status,
        )
