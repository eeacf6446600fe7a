"""FastAPI application for the ordertrack API.

Provides the main application instance with routers, CORS and the
domain-error exception handler configured.
"""

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import version as _pkg_version

from fastapi import Depends, FastAPI, Request

# Configure logging to stdout for uvicorn to capture
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("ordertrack").setLevel(logging.INFO)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordertrack.api.deps import get_config
from ordertrack.api.routes import audit, diag, orders
from ordertrack.cli.config import OrderTrackConfig
from ordertrack.errors import DomainError
from ordertrack.utils.redaction import redact_for_logging, sanitize_error_message

logger = logging.getLogger(__name__)


def _package_version() -> str:
    try:
        return _pkg_version("ordertrack")
    except Exception:
        return "unknown"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the resolved configuration (secrets masked) on startup."""
    config = get_config()
    logger.info(
        "ordertrack starting with config: %s",
        redact_for_logging(config.model_dump()),
    )
    if not config.upstream.is_configured:
        logger.warning(
            "Upstream base_url/token missing; order endpoints will fail until configured."
        )
    yield
    logger.info("ordertrack shutting down")


app = FastAPI(
    title="ordertrack API",
    description="Order tracking proxy and shipment audit for a commerce storefront",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS allowlist comes from configuration. If unset, CORS is disabled.
allowed_origins = get_config().server.allowed_origins
if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render domain errors with their registry status code.

    Args:
        request: The incoming request.
        exc: The DomainError raised by a route or service.

    Returns:
        JSONResponse with error title, code and detail.
    """
    if exc.http_status >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error": exc.title,
            "error_code": exc.code,
            "detail": sanitize_error_message(exc.message),
        },
    )


# Include routers
app.include_router(orders.router, prefix="/api")
app.include_router(audit.router, prefix="/api")
app.include_router(diag.router, prefix="/api")


@app.get("/health")
def health_check(config: OrderTrackConfig = Depends(get_config)) -> dict:
    """Health check with configuration status.

    Returns:
        Dictionary with status, version and whether the shop is configured.
    """
    return {
        "status": "healthy",
        "version": _package_version(),
        "shop_configured": config.upstream.is_configured,
    }


@app.get("/")
def root() -> dict:
    """API root with links to docs."""
    return {
        "name": "ordertrack API",
        "version": "0.1.0",
        "docs": "/docs",
    }
