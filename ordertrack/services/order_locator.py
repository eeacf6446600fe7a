"""Order lookup across unreliable, paginated upstream listings.

Lookups are ordered strategy chains: each strategy returns an ``Outcome``
and the locator short-circuits on the first success. Pagination is best
effort: it stops at the first empty page or failed request and keeps what
was already read.

Ordering: results keep upstream's native order. Callers that need "the most
recent order" take the first match; upstream does not guarantee recency
ordering and results are not re-sorted here.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from ordertrack.errors import BadRequestError, OrderNotFoundError, UpstreamUnavailableError
from ordertrack.services.envelope import read_last_page, unwrap_order, unwrap_orders_list
from ordertrack.services.models import Order
from ordertrack.services.outcomes import FailureKind, Outcome
from ordertrack.services.upstream_client import UpstreamClient
from ordertrack.utils.redaction import mask_email

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 500

Strategy = Callable[[str], Awaitable[Outcome[Order]]]


def _merge_unique(target: list[Order], seen: set[str], orders: list[Order]) -> None:
    for order in orders:
        if order.key not in seen:
            seen.add(order.key)
            target.append(order)


class OrderLocator:
    """Finds orders by id, number or email.

    Attributes:
        client: Upstream commerce API client.
        max_pages: Upper bound on pages read by any full scan.
    """

    def __init__(self, client: UpstreamClient, max_pages: int = DEFAULT_MAX_PAGES) -> None:
        self.client = client
        self.max_pages = max_pages

    # --- id / number lookup ---

    async def _by_direct_id(self, identifier: str) -> Outcome[Order]:
        outcome = await self.client.try_get_json(f"/orders/{identifier}")
        if not outcome.ok:
            return Outcome.failed(outcome.failure, outcome.detail, outcome.status)
        order = unwrap_order(outcome.value)
        if order is None:
            return Outcome.failed(FailureKind.EMPTY, "detail response held no order")
        return Outcome.success(order)

    async def _first_from_query(self, params: dict[str, Any]) -> Outcome[Order]:
        outcome = await self.client.try_get_json("/orders", params)
        if not outcome.ok:
            return Outcome.failed(outcome.failure, outcome.detail, outcome.status)
        orders = unwrap_orders_list(outcome.value)
        if not orders:
            return Outcome.failed(FailureKind.EMPTY, f"no orders for {params}")
        return Outcome.success(orders[0])

    async def _by_number_filter(self, identifier: str) -> Outcome[Order]:
        return await self._first_from_query({"number": identifier})

    async def _by_search(self, identifier: str) -> Outcome[Order]:
        return await self._first_from_query({"search": identifier})

    def id_strategies(self) -> list[tuple[str, Strategy]]:
        """Ordered lookup strategies for an id or order number."""
        return [
            ("direct_id", self._by_direct_id),
            ("number_filter", self._by_number_filter),
            ("search", self._by_search),
        ]

    async def fetch_order_by_any_id(self, id_or_number: str) -> Order:
        """Resolve an order by upstream id or human order number.

        Raises:
            BadRequestError: If the identifier is blank.
            OrderNotFoundError: If every strategy comes back empty or failed.
        """
        identifier = (id_or_number or "").strip().lstrip("#")
        if not identifier:
            raise BadRequestError("order_id")

        for name, strategy in self.id_strategies():
            outcome = await strategy(identifier)
            if outcome.ok:
                logger.info("Order %s resolved via %s", identifier, name)
                return outcome.value
            logger.debug(
                "Lookup strategy %s missed for %s: %s (%s)",
                name, identifier, outcome.failure, outcome.detail,
            )
        raise OrderNotFoundError(identifier)

    # --- email lookup ---

    async def _filtered_by_email(self, param: str, email: str) -> Outcome[list[Order]]:
        outcome = await self.client.try_get_json("/orders", {param: email})
        if not outcome.ok:
            return Outcome.failed(outcome.failure, outcome.detail, outcome.status)
        # Upstream silently ignores filters it does not support.
        matches = [o for o in unwrap_orders_list(outcome.value) if o.matches_email(email)]
        if not matches:
            return Outcome.failed(FailureKind.EMPTY, f"no matches via {param}")
        return Outcome.success(matches)

    async def list_orders_robust(self, email: str) -> list[Order]:
        """List orders owned by an email.

        Tries the ``search`` and ``email`` server-side filters, merging their
        matches. When both come back empty, scans every page and filters
        client-side.

        Returns:
            Matching orders in upstream order (possibly empty).

        Raises:
            BadRequestError: If email is blank.
        """
        if not email or not email.strip():
            raise BadRequestError("email")
        email = email.strip()

        found: list[Order] = []
        seen: set[str] = set()
        for param in ("search", "email"):
            outcome = await self._filtered_by_email(param, email)
            if outcome.ok:
                _merge_unique(found, seen, outcome.value)
        if found:
            return found

        logger.info("Filters found nothing for %s; scanning all pages", mask_email(email))
        async for page in self._iter_pages(require_first=False):
            _merge_unique(found, seen, [o for o in page if o.matches_email(email)])
        return found

    # --- full pagination ---

    async def _iter_pages(self, require_first: bool) -> AsyncIterator[list[Order]]:
        """Yield each non-empty page of orders, page 1 first.

        Args:
            require_first: Raise if page 1 cannot be read instead of
                yielding nothing.

        Raises:
            UpstreamUnavailableError: Page 1 failed and ``require_first``.
        """
        first = await self.client.try_get_json("/orders", {"page": 1})
        if not first.ok:
            if require_first:
                raise UpstreamUnavailableError(first.detail, status=first.status)
            logger.warning("Pagination stopped at page 1: %s", first.detail)
            return

        orders = unwrap_orders_list(first.value)
        if not orders:
            return
        yield orders

        last_page = min(read_last_page(first.value), self.max_pages)
        for page in range(2, last_page + 1):
            outcome = await self.client.try_get_json("/orders", {"page": page})
            if not outcome.ok:
                logger.warning(
                    "Pagination stopped at page %d of %d: %s", page, last_page, outcome.detail
                )
                return
            orders = unwrap_orders_list(outcome.value)
            if not orders:
                logger.info("Pagination ended at empty page %d of %d", page, last_page)
                return
            yield orders

    async def iter_all_orders_paged(self, limit: int | None = None) -> AsyncIterator[Order]:
        """Yield every order in the shop, one page in memory at a time.

        Args:
            limit: Stop after this many orders (None or <= 0 means no limit).
        """
        if limit is not None and limit <= 0:
            limit = None
        count = 0
        async for page in self._iter_pages(require_first=True):
            for order in page:
                count += 1
                yield order
                if limit is not None and count >= limit:
                    return

    async def list_all_orders_paged(self, limit: int | None = None) -> list[Order]:
        """Unfiltered full scan used by shop-wide audits."""
        return [order async for order in self.iter_all_orders_paged(limit)]
