"""ordertrack CLI.

Usage:
    ordertrack serve                     Start the HTTP API
    ordertrack audit --out audit.csv     Audit every order to a CSV file
    ordertrack lookup user@example.com   Show orders for an email
    ordertrack config show               Show resolved configuration
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ordertrack.api.schemas import OrderSummaryResponse
from ordertrack.cli.config import OrderTrackConfig, load_config
from ordertrack.cli.output import format_audit_summary, format_order_summaries
from ordertrack.errors import DomainError
from ordertrack.services.audit_engine import AuditSummary
from ordertrack.services.provider import build_audit_engine, build_locator
from ordertrack.services.report_emitter import render_csv_header, render_csv_rows
from ordertrack.services.status_translator import parse_lang
from ordertrack.utils.redaction import redact_for_logging

_log = logging.getLogger(__name__)

app = typer.Typer(
    name="ordertrack",
    help="Order tracking proxy and shipment audit",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")

console = Console()

# --- Global state ---
_config_path: str | None = None


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to ordertrack.yaml config file"
    ),
):
    """ordertrack CLI."""
    global _config_path
    _config_path = config


def _load() -> OrderTrackConfig:
    try:
        return load_config(config_path=_config_path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command()
def version():
    """Show ordertrack version."""
    from importlib.metadata import version as pkg_version
    try:
        v = pkg_version("ordertrack")
    except Exception:
        v = "unknown"
    console.print(f"[bold]ordertrack[/bold] v{v}")


@config_app.command("show")
def config_show(
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Display resolved configuration (secrets masked)."""
    cfg = _load()
    data = redact_for_logging(cfg.model_dump())
    if as_json:
        console.print_json(json.dumps(data))
        return
    for section, values in data.items():
        console.print(f"[bold]{section}:[/bold]")
        for key, value in values.items():
            console.print(f"  {key}: {value}")
    if not cfg.upstream.is_configured:
        console.print("\n[yellow]Upstream base_url/token not set.[/yellow]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
):
    """Start the HTTP API with uvicorn (single worker)."""
    import uvicorn

    cfg = _load()
    if _config_path:
        # The app loads its own config; point it at the same file.
        os.environ["ORDERTRACK_CONFIG_PATH"] = str(Path(_config_path).resolve())
    bind_host = host or cfg.server.host
    bind_port = port or cfg.server.port
    _log.info("Starting API on %s:%d", bind_host, bind_port)
    uvicorn.run(
        "ordertrack.api.main:app",
        host=bind_host,
        port=bind_port,
        workers=1,
        log_level=cfg.server.log_level,
    )


async def _run_audit(
    cfg: OrderTrackConfig,
    limit: int | None,
    lang: str,
    deep: bool,
    out: Path | None,
) -> AuditSummary:
    engine = build_audit_engine(cfg)
    language = parse_lang(lang)
    summary = AuditSummary()
    audits = engine.iter_order_audits(limit=limit, lang=language, deep=deep)
    if out is None:
        async for audit in audits:
            summary.record(audit)
        return summary

    with open(out, "w", encoding="utf-8", newline="") as f:
        f.write(render_csv_header(language))
        async for audit in audits:
            summary.record(audit)
            f.write(render_csv_rows(audit.rows, language))
            f.flush()
    return summary


@app.command()
def audit(
    limit: Optional[int] = typer.Option(None, "--limit", help="Max orders to audit"),
    lang: str = typer.Option("en", "--lang", help="Output language (en or pt)"),
    deep: bool = typer.Option(False, "--deep", help="Fetch and parse tracking pages"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the CSV report here"),
    as_json: bool = typer.Option(False, "--json", help="Print summary as JSON"),
):
    """Audit every order in the shop."""
    cfg = _load()
    try:
        summary = asyncio.run(_run_audit(cfg, limit, lang, deep, out))
    except DomainError as e:
        console.print(f"[red]{e.code}: {e.message}[/red]")
        raise typer.Exit(1)
    console.print(format_audit_summary(summary, as_json=as_json))
    if out is not None:
        console.print(f"CSV written to {out}")


@app.command()
def lookup(
    email: str = typer.Argument(..., help="Customer email"),
    lang: str = typer.Option("en", "--lang", help="Output language (en or pt)"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List orders owned by an email (first row is treated as most recent)."""
    cfg = _load()
    locator = build_locator(cfg)
    try:
        orders = asyncio.run(locator.list_orders_robust(email))
    except DomainError as e:
        console.print(f"[red]{e.code}: {e.message}[/red]")
        raise typer.Exit(1)
    language = parse_lang(lang)
    summaries = [OrderSummaryResponse.from_order(o, language) for o in orders]
    console.print(format_order_summaries(summaries, as_json=as_json))


if __name__ == "__main__":
    app()
