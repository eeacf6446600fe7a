"""CLI output formatters for Rich tables and JSON.

Human-readable Rich output by default, machine-parseable JSON with
``--json``. CLI commands only call these functions.
"""

import json

from rich.console import Console
from rich.table import Table

from ordertrack.api.schemas import OrderSummaryResponse
from ordertrack.services.audit_engine import AuditSummary

console = Console()


def _render(table: Table) -> str:
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def format_audit_summary(summary: AuditSummary, as_json: bool = False) -> str:
    """Format audit counts as a Rich table or JSON.

    Args:
        summary: Aggregated audit counts.
        as_json: If True, return JSON string instead of Rich table.

    Returns:
        Formatted string output.
    """
    if as_json:
        return json.dumps(summary.to_dict(), indent=2)

    table = Table(title="Shipment audit")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Orders scanned", str(summary.orders_scanned))
    table.add_row("Orders with issues", f"[red]{summary.orders_with_issues}[/red]")
    for issue, count in sorted(summary.issues.items(), key=lambda item: -item[1]):
        table.add_row(f"  {issue}", str(count))
    return _render(table)


def format_order_summaries(orders: list[OrderSummaryResponse], as_json: bool = False) -> str:
    """Format order lookup results."""
    if as_json:
        return json.dumps([o.model_dump(exclude_none=True) for o in orders], indent=2)

    if not orders:
        return "No orders found."

    table = Table(title="Orders", show_lines=True)
    table.add_column("Order", style="cyan", no_wrap=True)
    table.add_column("Created")
    table.add_column("Status")
    table.add_column("Tracking")
    table.add_column("Carrier")

    for order in orders:
        tracking = order.tracking
        carrier = "—"
        if tracking and (tracking.carrier_detected or tracking.carrier_claimed):
            carrier = tracking.carrier_detected or tracking.carrier_claimed
            if tracking.carrier_mismatch:
                carrier = f"[red]{carrier} (claimed {tracking.carrier_claimed})[/red]"
        table.add_row(
            order.order_number or order.order_id or "—",
            (order.created_at or "—")[:19],
            order.friendly_status or "—",
            (tracking.tracking_number if tracking else None) or "—",
            carrier,
        )
    return _render(table)
