"""Diagnostic passthrough routes for inspecting upstream response shapes."""

import json

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ordertrack.api.deps import get_upstream_client
from ordertrack.services.envelope import describe_shape
from ordertrack.services.upstream_client import UpstreamClient

router = APIRouter(prefix="/_diag", tags=["diagnostics"])

SAMPLE_CHARS = 2000


@router.get("/orders_raw")
async def orders_raw(
    page: str = Query("1"),
    client: UpstreamClient = Depends(get_upstream_client),
) -> JSONResponse:
    """Upstream ``/orders`` response as-is, status code mirrored."""
    raw = await client.get_raw("/orders", {"page": page})
    return JSONResponse(
        status_code=raw.status,
        content={
            "ok": raw.ok,
            "status": raw.status,
            "contentType": raw.content_type,
            "sample": raw.text[:SAMPLE_CHARS],
        },
    )


@router.get("/orders_shape")
async def orders_shape(
    client: UpstreamClient = Depends(get_upstream_client),
) -> JSONResponse:
    """Structure of page 1 of ``/orders`` and the envelope it resolves to."""
    raw = await client.get_raw("/orders", {"page": 1})
    if not raw.ok:
        return JSONResponse(
            status_code=raw.status,
            content={"ok": False, "status": raw.status, "hint": "Request to /orders failed"},
        )
    try:
        payload = json.loads(raw.text)
    except ValueError:
        return JSONResponse(
            status_code=502,
            content={"ok": False, "status": raw.status, "hint": "Response is not JSON"},
        )
    return JSONResponse(content={"ok": True, **describe_shape(payload)})
