"""Polled projection of server-owned orders for staff and table views."""

import logging
from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from pydantic import ValidationError

from bar_ordering_client.errors import BackendError
from bar_ordering_client.models.order_models import ACTIVE_STATUSES, Order, OrderStatus
from bar_ordering_client.observability.metrics import record_poll_failure
from bar_ordering_client.sample_data import sample_orders
from bar_ordering_client.services.order_service_client import OrderServiceClient

logger = logging.getLogger(__name__)

FeedListener = Callable[["OrderFeed"], None]
NewPendingListener = Callable[[int], None]

ALL_FILTER = "ALL"
ACTIVE_FILTER = "ACTIVE"

# Failures a refresh absorbs into the fallback policy
REFRESH_ERRORS = (BackendError, ValidationError, KeyError, TypeError)


class FallbackPolicy(str, Enum):
    """What a feed shows after a failed refresh."""

    KEEP_LAST = "keep_last"
    SAMPLE_DATA = "sample_data"


class OrderFeed:
    """Holds the latest order snapshot for one view scope.

    Staff feeds cover every order; table feeds cover one table and by default
    hide delivered and cancelled orders. Each successful refresh replaces the
    snapshot wholesale, newest first.
    """

    def __init__(
        self,
        order_client: OrderServiceClient,
        table_number: int | None = None,
        fallback: FallbackPolicy = FallbackPolicy.KEEP_LAST,
        hide_closed: bool | None = None,
        on_new_pending: NewPendingListener | None = None,
    ) -> None:
        """Initialize the feed.

        Args:
            order_client: Client for the order endpoints
            table_number: Restrict the feed to one table, None for all orders
            fallback: Behaviour after a failed refresh
            hide_closed: Drop terminal orders; defaults to True for table feeds
            on_new_pending: Called with the new pending count when it grows
        """
        self.order_client = order_client
        self.table_number = table_number
        self.fallback = fallback
        self.hide_closed = table_number is not None if hide_closed is None else hide_closed
        self.on_new_pending = on_new_pending

        self.orders: list[Order] = []
        self.error: str | None = None
        self.is_loading = False
        self.using_sample_data = False
        self.last_refreshed_at: datetime | None = None

        self._pending_count = 0
        self._listeners: list[FeedListener] = []

    @property
    def scope(self) -> str:
        return "staff" if self.table_number is None else "table"

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Register a change callback; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def refresh(self) -> list[Order]:
        """Fetch the current orders and replace the snapshot.

        Backend failures and unreadable responses are logged and handled by
        the fallback policy rather than raised.

        Returns:
            The snapshot after the refresh
        """
        self.is_loading = True
        try:
            fetched = await self._fetch()
        except REFRESH_ERRORS as e:
            self._handle_failure(e)
            return self.orders
        finally:
            self.is_loading = False

        self.error = None
        self.using_sample_data = False
        self.last_refreshed_at = datetime.now(UTC)
        self._replace(fetched)

        logger.debug(f"{self.scope} feed refreshed with {len(self.orders)} orders")
        return self.orders

    def apply_local_status(self, order_id: int, status: str) -> bool:
        """Change the status of one order in the local snapshot only.

        Args:
            order_id: Order to patch
            status: New status

        Returns:
            True if the order was in the snapshot
        """
        found = False
        patched = []
        for order in self.orders:
            if order.id == order_id:
                order = order.with_status(status)
                found = True
            patched.append(order)

        if found:
            self.orders = patched
            self._notify()

        return found

    def get_order(self, order_id: int) -> Order | None:
        return next((order for order in self.orders if order.id == order_id), None)

    def counts_by_status(self) -> dict[str, int]:
        """Number of orders per status, with every known status present."""
        counts = Counter(order.status for order in self.orders)
        result = {status.value: counts.get(status.value, 0) for status in OrderStatus}
        for status, count in counts.items():
            result.setdefault(status, count)
        result[ALL_FILTER] = len(self.orders)
        return result

    def filter_orders(self, status: str = ALL_FILTER, table_number: int | None = None) -> list[Order]:
        """Orders matching a status filter and optionally a table.

        Args:
            status: ``ALL``, ``ACTIVE`` (pending, in progress or ready) or a status name
            table_number: Only orders for this table

        Returns:
            Matching orders in snapshot order
        """
        wanted = status.strip().upper() or ALL_FILTER
        orders = self.orders

        if wanted == ACTIVE_FILTER:
            orders = [order for order in orders if order.lifecycle_status in ACTIVE_STATUSES]
        elif wanted != ALL_FILTER:
            orders = [order for order in orders if order.status == wanted]

        if table_number is not None:
            orders = [order for order in orders if order.table_number == table_number]

        return orders

    async def _fetch(self) -> list[Order]:
        if self.table_number is None:
            return await self.order_client.list_orders()
        return await self.order_client.list_by_table(self.table_number)

    def _replace(self, orders: list[Order]) -> None:
        if self.hide_closed:
            orders = [order for order in orders if not order.is_terminal]
        if self.table_number is not None:
            orders = [order for order in orders if order.table_number in (None, self.table_number)]

        self.orders = sorted(orders, key=lambda order: order.sort_timestamp, reverse=True)
        self._check_new_pending()
        self._notify()

    def _handle_failure(self, error: Exception) -> None:
        self.error = str(error) or type(error).__name__
        record_poll_failure(self.scope, type(error).__name__)

        if self.fallback is FallbackPolicy.SAMPLE_DATA:
            logger.warning(f"{self.scope} feed refresh failed, showing sample orders: {error}")
            self.using_sample_data = True
            self._replace(sample_orders())
        else:
            logger.warning(f"{self.scope} feed refresh failed, keeping last snapshot: {error}")
            self._notify()

    def _check_new_pending(self) -> None:
        pending = sum(1 for order in self.orders if order.status == OrderStatus.PENDING.value)
        if pending > self._pending_count > 0 and self.on_new_pending is not None:
            self.on_new_pending(pending)
        self._pending_count = pending

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
