"""Shipment audit over a shop's orders.

For every order and every fulfillment on it, the engine checks the
tracking number against carrier heuristics, verifies the tracking URL and,
in deep mode, reads the carrier page. It emits one ``AuditRow`` per
(order, fulfillment) pair plus a per-order issue list.

Everything runs strictly in sequence: one order at a time, one
fulfillment at a time. At most one request is in flight against the
commerce API or any carrier site during a run.

Usage:
    engine = AuditEngine(locator, TrackingVerifier())
    report = await engine.audit_shop(limit=50, lang=Lang.EN, deep=False)
    report.summary.orders_with_issues
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field

from pydantic import BaseModel

from ordertrack.services.carrier_validator import (
    carrier_mismatch,
    detect_carrier_by_number,
    normalize_carrier,
)
from ordertrack.services.models import Fulfillment, Order
from ordertrack.services.order_locator import OrderLocator
from ordertrack.services.status_translator import Lang, friendly_status, is_delivered_like
from ordertrack.services.tracking_verifier import (
    PageCheck,
    TrackingVerifier,
    UrlCheck,
    derive_status_conflict,
)

logger = logging.getLogger(__name__)

MISSING_FULFILLMENT = "missing_fulfillment"
MISSING_TRACKING_NUMBER = "missing_tracking_number"
UNKNOWN_CARRIER_PATTERN = "unknown_carrier_pattern"
MISSING_TRACKING_URL = "missing_tracking_url"
TRACKING_URL_NOT_OK = "tracking_url_not_ok"
TRACKING_PAGE_INVALID = "tracking_page_invalid"
STATUS_CONFLICT = "status_conflict"

ISSUE_KINDS = (
    MISSING_FULFILLMENT,
    MISSING_TRACKING_NUMBER,
    UNKNOWN_CARRIER_PATTERN,
    MISSING_TRACKING_URL,
    TRACKING_URL_NOT_OK,
    TRACKING_PAGE_INVALID,
    STATUS_CONFLICT,
)

StopCheck = Callable[[], Awaitable[bool]]


@dataclass(frozen=True)
class TrackingAssessment:
    """Derived tracking facts for one fulfillment."""

    carrier_detected: str | None
    carrier_claimed: str | None
    carrier_mismatch: bool
    url_reachable: bool
    url_status: int
    page_valid: bool | None = None
    page_detected_status: str | None = None
    status_conflict: bool = False


class AuditRow(BaseModel):
    """Flattened (order, fulfillment) projection; field order is column order."""

    order_id: str | None = None
    order_number: str | None = None
    created_at: str | None = None
    email: str | None = None
    financial_status: str | None = None
    fulfillment_status: str | None = None
    friendly_status: str | None = None
    fulfillment_index: int = 0
    shipment_status: str | None = None
    tracking_number: str | None = None
    tracking_company: str | None = None
    carrier_detected: str | None = None
    carrier_claimed: str | None = None
    carrier_mismatch: bool = False
    tracking_url: str | None = None
    url_reachable: bool = False
    url_status: int = 0
    page_valid: bool | None = None
    page_detected_status: str | None = None
    status_conflict: bool = False
    issues: str = ""


@dataclass
class OrderAudit:
    """Audit result for a single order."""

    order: Order
    rows: list[AuditRow] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)

    def add_issue(self, issue: str) -> None:
        if issue not in self.issues:
            self.issues.append(issue)


@dataclass
class AuditSummary:
    """Aggregate counts over an audit run."""

    orders_scanned: int = 0
    orders_with_issues: int = 0
    issues: dict[str, int] = field(default_factory=dict)

    def record(self, audit: OrderAudit) -> None:
        self.orders_scanned += 1
        if audit.issues:
            self.orders_with_issues += 1
        for issue in audit.issues:
            self.issues[issue] = self.issues.get(issue, 0) + 1

    def to_dict(self) -> dict:
        """Counts with issues listed in ISSUE_KINDS order."""
        return {
            "orders_scanned": self.orders_scanned,
            "orders_with_issues": self.orders_with_issues,
            "issues": {kind: self.issues[kind] for kind in ISSUE_KINDS if kind in self.issues},
        }


@dataclass
class AuditReport:
    """All rows of a run plus the summary."""

    rows: list[AuditRow] = field(default_factory=list)
    summary: AuditSummary = field(default_factory=AuditSummary)


class AuditEngine:
    """Drives carrier validation and tracking checks across orders."""

    def __init__(self, locator: OrderLocator, verifier: TrackingVerifier) -> None:
        self.locator = locator
        self.verifier = verifier

    async def assess_fulfillment(
        self,
        order: Order,
        fulfillment: Fulfillment | None,
        deep: bool,
    ) -> TrackingAssessment:
        """Run carrier and URL checks for one fulfillment (None = no fulfillment)."""
        tracking_number = fulfillment.tracking_number if fulfillment else None
        tracking_url = fulfillment.tracking_url if fulfillment else None
        claimed = normalize_carrier(fulfillment.tracking_company if fulfillment else None)
        detected = detect_carrier_by_number(tracking_number)

        url_check = UrlCheck(ok=False, status=0)
        page: PageCheck | None = None
        if tracking_url:
            url_check = await self.verifier.check_tracking_url(tracking_url)
            if deep:
                page = await self.verifier.deep_tracking_check(detected or claimed, tracking_url)

        reported_delivered = is_delivered_like(order.fulfillment_status) or is_delivered_like(
            fulfillment.status if fulfillment else None
        )
        return TrackingAssessment(
            carrier_detected=detected,
            carrier_claimed=claimed,
            carrier_mismatch=carrier_mismatch(detected, claimed),
            url_reachable=url_check.ok,
            url_status=url_check.status,
            page_valid=page.page_valid if page else None,
            page_detected_status=page.detected_status if page else None,
            status_conflict=derive_status_conflict(reported_delivered, page),
        )

    async def audit_order(self, order: Order, lang: Lang = Lang.EN, deep: bool = False) -> OrderAudit:
        """Audit one order.

        Args:
            order: Canonical order.
            lang: Language for the friendly status.
            deep: Also fetch and parse tracking pages.

        Returns:
            OrderAudit with one row per fulfillment (one synthetic row when
            the order has none) and the deduplicated issue list.
        """
        audit = OrderAudit(order=order)
        entries: list[Fulfillment | None] = list(order.fulfillments)
        if not entries:
            audit.add_issue(MISSING_FULFILLMENT)
            entries = [None]

        assessed: list[tuple[int, Fulfillment | None, TrackingAssessment]] = []
        for index, fulfillment in enumerate(entries):
            assessment = await self.assess_fulfillment(order, fulfillment, deep)
            tracking_number = fulfillment.tracking_number if fulfillment else None
            tracking_url = fulfillment.tracking_url if fulfillment else None

            if not tracking_number:
                audit.add_issue(MISSING_TRACKING_NUMBER)
            elif not assessment.carrier_detected and not assessment.carrier_claimed:
                audit.add_issue(UNKNOWN_CARRIER_PATTERN)
            if not tracking_url:
                audit.add_issue(MISSING_TRACKING_URL)
            elif not assessment.url_reachable:
                audit.add_issue(TRACKING_URL_NOT_OK)
            if assessment.page_valid is False:
                audit.add_issue(TRACKING_PAGE_INVALID)
            if assessment.status_conflict:
                audit.add_issue(STATUS_CONFLICT)
            assessed.append((index, fulfillment, assessment))

        # Rows carry the order's full issue list, so build them last.
        issues_text = "|".join(audit.issues)
        friendly = friendly_status(order.fulfillment_status, lang)
        for index, fulfillment, assessment in assessed:
            audit.rows.append(
                AuditRow(
                    order_id=order.id,
                    order_number=order.number,
                    created_at=order.created_at,
                    email=order.primary_email,
                    financial_status=order.financial_status,
                    fulfillment_status=order.fulfillment_status,
                    friendly_status=friendly,
                    fulfillment_index=index + 1 if fulfillment else 0,
                    shipment_status=fulfillment.status if fulfillment else None,
                    tracking_number=fulfillment.tracking_number if fulfillment else None,
                    tracking_company=fulfillment.tracking_company if fulfillment else None,
                    carrier_detected=assessment.carrier_detected,
                    carrier_claimed=assessment.carrier_claimed,
                    carrier_mismatch=assessment.carrier_mismatch,
                    tracking_url=fulfillment.tracking_url if fulfillment else None,
                    url_reachable=assessment.url_reachable,
                    url_status=assessment.url_status,
                    page_valid=assessment.page_valid,
                    page_detected_status=assessment.page_detected_status,
                    status_conflict=assessment.status_conflict,
                    issues=issues_text,
                )
            )
        return audit

    async def iter_order_audits(
        self,
        limit: int | None = None,
        lang: Lang = Lang.EN,
        deep: bool = False,
        should_stop: StopCheck | None = None,
    ) -> AsyncIterator[OrderAudit]:
        """Audit the shop order by order, yielding as each finishes.

        Args:
            limit: Max orders to audit (None or <= 0 for all).
            lang: Language for friendly statuses.
            deep: Enable tracking-page checks.
            should_stop: Awaited between orders; a True result ends the
                run early (e.g. the HTTP client disconnected).
        """
        async for order in self.locator.iter_all_orders_paged(limit):
            if should_stop is not None and await should_stop():
                logger.info("Audit stopped early by caller")
                return
            yield await self.audit_order(order, lang=lang, deep=deep)

    async def audit_shop(
        self,
        limit: int | None = None,
        lang: Lang = Lang.EN,
        deep: bool = False,
    ) -> AuditReport:
        """Audit every order (optionally limited) and collect all rows."""
        report = AuditReport()
        async for audit in self.iter_order_audits(limit=limit, lang=lang, deep=deep):
            report.rows.extend(audit.rows)
            report.summary.record(audit)
        logger.info(
            "Audit finished: %d orders, %d with issues, deep=%s",
            report.summary.orders_scanned,
            report.summary.orders_with_issues,
            deep,
        )
        return report
