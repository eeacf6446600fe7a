"""FastAPI routes for customer-facing order lookups.

Email-based endpoints return the first match in upstream order as the
"most recent" order; upstream does not guarantee recency ordering.
Errors are raised as domain exceptions and rendered by the app handler.
"""

import logging

from fastapi import APIRouter, Depends, Query

from ordertrack.api.deps import get_locator, parse_flag
from ordertrack.api.schemas import ErrorResponse, OrderListResponse, OrderSummaryResponse
from ordertrack.errors import BadRequestError, EmailMismatchError, OrderNotFoundError
from ordertrack.services.models import Order
from ordertrack.services.order_locator import OrderLocator
from ordertrack.services.status_translator import parse_lang
from ordertrack.utils.redaction import mask_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])

ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 403, 404, 500)
}


def _require(value: str | None, param: str) -> str:
    if value is None or not value.strip():
        raise BadRequestError(param)
    return value.strip()


async def _most_recent_for_email(locator: OrderLocator, email: str) -> Order:
    orders = await locator.list_orders_robust(email)
    if not orders:
        raise OrderNotFoundError(email)
    return orders[0]


async def _owned_order(
    locator: OrderLocator, order_id: str, email: str | None, bypass_email: bool
) -> Order:
    order = await locator.fetch_order_by_any_id(order_id)
    if bypass_email:
        logger.info("Email ownership check bypassed for order %s", order_id)
        return order
    if not order.matches_email(email):
        logger.info("Email %s does not own order %s", mask_email(email), order_id)
        raise EmailMismatchError(order_id)
    return order


@router.get(
    "/order-by-email",
    response_model=OrderSummaryResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def order_by_email(
    email: str | None = Query(None),
    debug: str | None = Query(None),
    lang: str | None = Query(None),
    locator: OrderLocator = Depends(get_locator),
) -> OrderSummaryResponse:
    """Most recent order for an email, with tracking of its last fulfillment."""
    email = _require(email, "email")
    order = await _most_recent_for_email(locator, email)
    return OrderSummaryResponse.from_order(order, parse_lang(lang), debug=parse_flag(debug))


@router.get(
    "/order-status",
    response_model=OrderSummaryResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def order_status(
    order_id: str | None = Query(None),
    email: str | None = Query(None),
    debug: str | None = Query(None),
    bypass_email: str | None = Query(None),
    lang: str | None = Query(None),
    locator: OrderLocator = Depends(get_locator),
) -> OrderSummaryResponse:
    """Single order by id or number, checked against the caller's email."""
    order_id = _require(order_id, "order_id")
    bypass = parse_flag(bypass_email)
    if not bypass:
        email = _require(email, "email")
    order = await _owned_order(locator, order_id, email, bypass)
    return OrderSummaryResponse.from_order(order, parse_lang(lang), debug=parse_flag(debug))


@router.get(
    "/orders-by-email",
    response_model=OrderListResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def orders_by_email(
    email: str | None = Query(None),
    lang: str | None = Query(None),
    locator: OrderLocator = Depends(get_locator),
) -> OrderListResponse:
    """Every order owned by an email, in upstream order."""
    email = _require(email, "email")
    orders = await locator.list_orders_robust(email)
    language = parse_lang(lang)
    return OrderListResponse(
        email=email,
        count=len(orders),
        orders=[OrderSummaryResponse.from_order(o, language) for o in orders],
    )


@router.get(
    "/find-and-status",
    response_model=OrderSummaryResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def find_and_status(
    email: str | None = Query(None),
    order_id: str | None = Query(None),
    debug: str | None = Query(None),
    lang: str | None = Query(None),
    locator: OrderLocator = Depends(get_locator),
) -> OrderSummaryResponse:
    """Order by id when given (with ownership check), else most recent by email."""
    email = _require(email, "email")
    if order_id and order_id.strip():
        order = await _owned_order(locator, order_id.strip(), email, bypass_email=False)
    else:
        order = await _most_recent_for_email(locator, email)
    return OrderSummaryResponse.from_order(order, parse_lang(lang), debug=parse_flag(debug))
