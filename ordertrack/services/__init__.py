"""Service layer for ordertrack.

Order normalization, lookup, carrier validation, tracking checks and
shipment audits over the upstream commerce API.
"""

from ordertrack.services.audit_engine import AuditEngine, AuditReport, AuditRow, AuditSummary
from ordertrack.services.models import Fulfillment, Order
from ordertrack.services.order_locator import OrderLocator
from ordertrack.services.tracking_verifier import TrackingVerifier
from ordertrack.services.upstream_client import UpstreamClient

__all__ = [
    "AuditEngine",
    "AuditReport",
    "AuditRow",
    "AuditSummary",
    "Fulfillment",
    "Order",
    "OrderLocator",
    "TrackingVerifier",
    "UpstreamClient",
]
