"""FastAPI routes for shop-wide shipment audits.

``/audit-shipments`` buffers the whole run and answers with JSON (summary
plus a sample) or a CSV attachment. ``/audit-shipments-stream`` writes CSV
rows as each order is audited, so large shops start receiving data before
the scan ends and memory stays bounded by one page of orders.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ordertrack.api.deps import get_audit_engine, get_config, parse_flag
from ordertrack.api.schemas import ErrorResponse
from ordertrack.cli.config import OrderTrackConfig
from ordertrack.services.audit_engine import AuditEngine
from ordertrack.services.report_emitter import (
    csv_filename,
    render_csv,
    render_json,
    stream_csv,
)
from ordertrack.services.status_translator import parse_lang

logger = logging.getLogger(__name__)

router = APIRouter(tags=["audit"])

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _attachment_headers(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/audit-shipments", responses={500: {"model": ErrorResponse}})
async def audit_shipments(
    limit: int | None = Query(None, ge=0),
    download: str | None = Query(None),
    lang: str | None = Query(None),
    deep: str | None = Query(None),
    engine: AuditEngine = Depends(get_audit_engine),
    config: OrderTrackConfig = Depends(get_config),
) -> Response:
    """Audit the shop and return a JSON summary or the full CSV."""
    language = parse_lang(lang)
    deep_mode = parse_flag(deep)
    logger.info("Audit requested: limit=%s deep=%s lang=%s", limit, deep_mode, language.value)

    report = await engine.audit_shop(limit=limit, lang=language, deep=deep_mode)
    if parse_flag(download):
        return Response(
            content=render_csv(report.rows, language),
            media_type=CSV_MEDIA_TYPE,
            headers=_attachment_headers(csv_filename(language)),
        )
    return JSONResponse(render_json(report, language, sample_size=config.audit.sample_size))


@router.get("/audit-shipments-stream")
async def audit_shipments_stream(
    request: Request,
    limit: int | None = Query(None, ge=0),
    lang: str | None = Query(None),
    deep: str | None = Query(None),
    engine: AuditEngine = Depends(get_audit_engine),
) -> StreamingResponse:
    """Stream the audit as a chunked CSV attachment."""
    language = parse_lang(lang)
    audits = engine.iter_order_audits(
        limit=limit,
        lang=language,
        deep=parse_flag(deep),
        should_stop=request.is_disconnected,
    )
    return StreamingResponse(
        stream_csv(audits, language),
        media_type=CSV_MEDIA_TYPE,
        headers=_attachment_headers(csv_filename(language)),
    )
