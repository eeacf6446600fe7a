"""Render audit results as JSON or CSV.

CSV values are always quoted, with embedded quotes doubled. Booleans print
as ``true``/``false`` in English and ``Sim``/``Não`` in Portuguese; JSON
keeps native booleans.
"""

import csv
import io
import logging
from collections.abc import AsyncIterator, Iterable
from datetime import datetime

from ordertrack.errors.registry import format_message
from ordertrack.services.audit_engine import AuditReport, AuditRow, OrderAudit
from ordertrack.services.status_translator import Lang

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 20

# (row field, English header, Portuguese header)
CSV_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("order_id", "Order ID", "ID do pedido"),
    ("order_number", "Order number", "Número do pedido"),
    ("created_at", "Created at", "Criado em"),
    ("email", "Email", "E-mail"),
    ("financial_status", "Financial status", "Status financeiro"),
    ("fulfillment_status", "Fulfillment status", "Status de envio"),
    ("friendly_status", "Friendly status", "Status amigável"),
    ("fulfillment_index", "Fulfillment #", "Envio nº"),
    ("shipment_status", "Shipment status", "Status da remessa"),
    ("tracking_number", "Tracking number", "Código de rastreio"),
    ("tracking_company", "Tracking company", "Transportadora informada"),
    ("carrier_detected", "Carrier detected", "Transportadora detectada"),
    ("carrier_claimed", "Carrier claimed", "Transportadora declarada"),
    ("carrier_mismatch", "Carrier mismatch", "Divergência de transportadora"),
    ("tracking_url", "Tracking URL", "URL de rastreio"),
    ("url_reachable", "URL reachable", "URL acessível"),
    ("url_status", "URL HTTP status", "Status HTTP da URL"),
    ("page_valid", "Tracking page valid", "Página de rastreio válida"),
    ("page_detected_status", "Page detected status", "Status detectado na página"),
    ("status_conflict", "Status conflict", "Conflito de status"),
    ("issues", "Issues", "Problemas"),
)

_BOOL_LABELS = {
    Lang.EN: ("true", "false"),
    Lang.PT: ("Sim", "Não"),
}

_NOTES = {
    Lang.EN: "Sample shows the first {n} rows. Use download=1 for the full CSV.",
    Lang.PT: "A amostra mostra as primeiras {n} linhas. Use download=1 para o CSV completo.",
}

ERROR_MARKER = "ERROR"
STREAM_ABORTED = "E-4001"


def csv_header(lang: Lang) -> list[str]:
    index = 1 if lang == Lang.EN else 2
    return [column[index] for column in CSV_COLUMNS]


def format_csv_value(value: object, lang: Lang) -> str:
    """Localize a single cell before quoting."""
    if value is None:
        return ""
    if isinstance(value, bool):
        yes, no = _BOOL_LABELS[lang]
        return yes if value else no
    return str(value)


def _write_lines(lines: Iterable[list[str]]) -> str:
    # QUOTE_ALL wraps every value in quotes and doubles embedded quotes.
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    writer.writerows(lines)
    return buffer.getvalue()


def row_values(row: AuditRow, lang: Lang) -> list[str]:
    data = row.model_dump()
    return [format_csv_value(data[key], lang) for key, _, _ in CSV_COLUMNS]


def render_csv_header(lang: Lang) -> str:
    return _write_lines([csv_header(lang)])


def render_csv_rows(rows: Iterable[AuditRow], lang: Lang) -> str:
    return _write_lines(row_values(row, lang) for row in rows)


def render_csv(rows: Iterable[AuditRow], lang: Lang = Lang.EN) -> str:
    """Build the full CSV document in memory."""
    return render_csv_header(lang) + render_csv_rows(rows, lang)


def render_error_row(detail: str) -> str:
    return _write_lines([[ERROR_MARKER, detail]])


def render_json(
    report: AuditReport,
    lang: Lang = Lang.EN,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> dict:
    """Interactive JSON payload: summary, first rows and a usage note."""
    return {
        "summary": report.summary.to_dict(),
        "sample": [row.model_dump() for row in report.rows[:sample_size]],
        "note": _NOTES[lang].format(n=sample_size),
    }


async def stream_csv(audits: AsyncIterator[OrderAudit], lang: Lang = Lang.EN) -> AsyncIterator[str]:
    """Yield the CSV header, then each order's rows as soon as it is audited.

    A failure mid-scan yields one ``"ERROR","Audit stream aborted: <detail>"``
    row and ends the stream.
    """
    yield render_csv_header(lang)
    orders = 0
    try:
        async for audit in audits:
            orders += 1
            if audit.rows:
                yield render_csv_rows(audit.rows, lang)
    except Exception as e:
        logger.exception("Audit stream failed after %d orders", orders)
        yield render_error_row(format_message(STREAM_ABORTED, detail=str(e) or type(e).__name__))
        return
    logger.info("Audit stream finished: %d orders", orders)


def csv_filename(lang: Lang = Lang.EN, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    prefix = "auditoria-envios" if lang == Lang.PT else "shipment-audit"
    return f"{prefix}-{stamp}.csv"
