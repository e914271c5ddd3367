"""Wiring of the clients, stores and services one running instance shares."""

import logging
from dataclasses import dataclass

import httpx

from bar_ordering_client.config import Settings
from bar_ordering_client.repositories.credential_store import CredentialStore
from bar_ordering_client.services.auth_service import StaffAuthService
from bar_ordering_client.services.backend_client import BackendClient
from bar_ordering_client.services.bill_service_client import BillServiceClient
from bar_ordering_client.services.order_feed import OrderFeed
from bar_ordering_client.services.order_service_client import OrderServiceClient
from bar_ordering_client.services.order_submission_service import OrderSubmissionService
from bar_ordering_client.services.polling import PollingTask
from bar_ordering_client.services.product_service_client import ProductServiceClient
from bar_ordering_client.services.status_transition_service import StatusTransitionService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the HTTP handlers need, passed explicitly instead of as globals.

    Attributes:
        settings: Runtime configuration
        credential_store: Persisted staff session
        backend: Shared backend HTTP client
        products: Product catalog client
        orders: Order client
        bills: Billing client
        auth: Staff session service
        staff_feed: Feed of all orders for the staff views
        staff_poller: Periodic refresh of the staff feed
        submissions: Customer order submission service
        transitions: Staff status change service
    """

    settings: Settings
    credential_store: CredentialStore
    backend: BackendClient
    products: ProductServiceClient
    orders: OrderServiceClient
    bills: BillServiceClient
    auth: StaffAuthService
    staff_feed: OrderFeed
    staff_poller: PollingTask
    submissions: OrderSubmissionService
    transitions: StatusTransitionService

    def table_feed(self, table_number: int) -> OrderFeed:
        """A customer feed for one table, hiding delivered and cancelled orders."""
        return OrderFeed(self.orders, table_number=table_number)


def build_context(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppContext:
    """Create all collaborators from settings.

    Args:
        settings: Runtime configuration
        transport: Optional httpx transport for the backend client, used by tests

    Returns:
        Fully wired AppContext
    """
    credential_store = CredentialStore(settings.credentials_path)
    backend = BackendClient(
        base_url=settings.api_base_url,
        credential_store=credential_store,
        timeout_seconds=settings.api_timeout_seconds,
        transport=transport,
    )

    orders = OrderServiceClient(backend)
    staff_feed = OrderFeed(
        orders,
        fallback=settings.staff_feed_fallback,
        on_new_pending=lambda count: logger.info(f"New pending orders, {count} waiting"),
    )

    logger.info(
        f"Backend client configured - URL: {settings.api_base_url}, "
        f"status failure mode: {settings.status_failure_mode.value}"
    )

    return AppContext(
        settings=settings,
        credential_store=credential_store,
        backend=backend,
        products=ProductServiceClient(backend),
        orders=orders,
        bills=BillServiceClient(backend),
        auth=StaffAuthService(backend, credential_store),
        staff_feed=staff_feed,
        staff_poller=PollingTask(
            staff_feed.refresh,
            settings.staff_poll_interval_seconds,
            name="staff-order-feed",
        ),
        submissions=OrderSubmissionService(orders),
        transitions=StatusTransitionService(
            orders, staff_feed, failure_mode=settings.status_failure_mode
        ),
    )
