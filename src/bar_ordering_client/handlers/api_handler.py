"""FastAPI application exposing the customer and staff ordering flows."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Path, Query
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from bar_ordering_client.app_context import AppContext
from bar_ordering_client.auth.staff_dependencies import require_staff_session
from bar_ordering_client.errors import BackendError, BackendUnauthorizedError
from bar_ordering_client.models.auth_models import StaffUser
from bar_ordering_client.models.order_models import Order, OrderLine, next_statuses
from bar_ordering_client.models.product_models import Product
from bar_ordering_client.routes import menu_url, parse_table_number, table_order_url
from bar_ordering_client.services.order_feed import ALL_FILTER, OrderFeed
from bar_ordering_client.services.order_service_client import OrderRequestLine
from bar_ordering_client.services.qr_poster import (
    MENU_POSTER_FILENAME,
    MENU_QR_FILENAME,
    render_menu_poster,
    render_qr_png,
    render_table_poster,
    render_table_qr_archive,
    table_poster_filename,
    table_qr_filename,
)

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class OrderResponse(BaseModel):
    """Order as shown on the customer and staff screens."""

    id: int
    status: str
    status_label: str
    status_variant: str
    next_statuses: list[str]
    client_name: str | None = None
    table_number: int | None = None
    waiter_username: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    amount_due: Decimal | None = None
    lines: list[OrderLine] = Field(default_factory=list)

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        badge = order.badge
        return cls(
            id=order.id,
            status=order.status,
            status_label=badge.label,
            status_variant=badge.variant,
            next_statuses=[status.value for status in next_statuses(order.status)],
            client_name=order.client_name,
            table_number=order.table_number,
            waiter_username=order.waiter_username,
            notes=order.notes,
            created_at=order.created_at,
            amount_due=order.amount_due,
            lines=list(order.lines),
        )


class TableOrdersResponse(BaseModel):
    """Open orders for one table."""

    table_number: int
    orders: list[OrderResponse]
    error: str | None = None
    refresh_interval_seconds: float


class StaffOrdersResponse(BaseModel):
    """Staff feed snapshot with per-status counts."""

    orders: list[OrderResponse]
    counts: dict[str, int]
    error: str | None = None
    using_sample_data: bool = False
    last_refreshed_at: datetime | None = None
    refresh_interval_seconds: float


class OrderLineRequest(BaseModel):
    """Product and quantity in a submission."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productId")
    quantity: int


class OrderSubmissionRequest(BaseModel):
    """Customer order placed from a table."""

    model_config = ConfigDict(populate_by_name=True)

    client_name: str = Field(default="", alias="clientName")
    products: list[OrderLineRequest] = Field(default_factory=list)


class OrderSubmissionResponse(BaseModel):
    """Accepted customer order."""

    table_number: int
    success: bool
    confirmation_path: str | None = None
    order: OrderResponse | None = None


class StatusTransitionResponse(BaseModel):
    """Outcome of a staff status change."""

    order_id: int
    target_status: str
    success: bool
    applied_locally: bool = False
    error_message: str | None = None


class LoginRequest(BaseModel):
    """Staff credentials."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LogoutResponse(BaseModel):
    """Logout acknowledgement."""

    status: str


def create_app(context: AppContext, start_poller: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Wired clients and services
        start_poller: Start the staff feed poller with the application lifespan

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await context.auth.restore_session()
        if start_poller:
            context.staff_poller.start()
        yield
        await context.staff_poller.stop()

    app = FastAPI(
        title="Bar Ordering Client API",
        description="Table ordering, staff order tracking and QR code generation",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Store the context in app state for access in route handlers
    app.state.context = context

    def staff_session() -> StaffUser | None:
        """Dependency enforcing the optional staff login gate."""
        return require_staff_session(
            auth_service=app.state.context.auth,
            enforce=app.state.context.settings.enforce_staff_login,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint.

        Returns:
            Health status indicating service is running
        """
        return HealthResponse(status="healthy")

    @app.get("/menu", response_model=list[Product], tags=["Menu"])
    async def get_menu(category: str | None = None) -> list[Product]:
        """List orderable products, optionally for one category.

        Raises:
            HTTPException: 502 if the backend cannot list products
        """
        try:
            products: list[Product] = await app.state.context.products.list_available_products(category)
        except BackendError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        return products

    @app.get("/tables/{table}/orders", response_model=TableOrdersResponse, tags=["Customer Orders"])
    async def get_table_orders(table: str) -> TableOrdersResponse:
        """Open orders for a table, newest first.

        Args:
            table: Table number path segment from the scanned code

        Raises:
            HTTPException: 404 if the segment is not a table number
        """
        table_number = _require_table(table)
        feed: OrderFeed = app.state.context.table_feed(table_number)
        await feed.refresh()

        return TableOrdersResponse(
            table_number=table_number,
            orders=[OrderResponse.from_order(order) for order in feed.orders],
            error=feed.error,
            refresh_interval_seconds=app.state.context.settings.customer_poll_interval_seconds,
        )

    @app.post(
        "/tables/{table}/orders",
        response_model=OrderSubmissionResponse,
        status_code=201,
        tags=["Customer Orders"],
    )
    async def submit_table_order(table: str, request: OrderSubmissionRequest) -> OrderSubmissionResponse:
        """Submit a customer order for a table.

        Raises:
            HTTPException: 404 without a table, 422 for local validation failures,
                502 when the backend does not accept the order
        """
        table_number = _require_table(table)
        logger.info(f"Order submission received for table {table_number}")

        result = await app.state.context.submissions.submit(
            table_number=table_number,
            client_name=request.client_name,
            lines=[
                OrderRequestLine(product_id=line.product_id, quantity=line.quantity)
                for line in request.products
            ],
        )

        if result.validation_error:
            raise HTTPException(status_code=422, detail=result.error_message)

        if not result.success:
            raise HTTPException(status_code=502, detail=result.error_message)

        return OrderSubmissionResponse(
            table_number=table_number,
            success=True,
            confirmation_path=result.confirmation_path,
            order=OrderResponse.from_order(result.order) if result.order else None,
        )

    @app.get("/staff/orders", response_model=StaffOrdersResponse, tags=["Staff Orders"])
    async def get_staff_orders(
        status: str = ALL_FILTER,
        table: int | None = Query(None, gt=0),
        _staff: StaffUser | None = Depends(staff_session),
    ) -> StaffOrdersResponse:
        """Current staff feed snapshot.

        Args:
            status: ALL, ACTIVE or a status name
            table: Optional table filter
        """
        return _staff_snapshot(app.state.context, status=status, table=table)

    @app.post("/staff/orders/refresh", response_model=StaffOrdersResponse, tags=["Staff Orders"])
    async def refresh_staff_orders(
        _staff: StaffUser | None = Depends(staff_session),
    ) -> StaffOrdersResponse:
        """Refresh the staff feed immediately without touching the poll timer.

        The fetch runs on the staff poller, so shutting the poller down also
        cancels it.
        """
        await app.state.context.staff_poller.run_now()
        return _staff_snapshot(app.state.context)

    @app.post(
        "/staff/orders/{order_id}/status/{status}",
        response_model=StatusTransitionResponse,
        tags=["Staff Orders"],
    )
    async def change_order_status(
        order_id: int,
        status: str,
        _staff: StaffUser | None = Depends(staff_session),
    ) -> StatusTransitionResponse:
        """Move an order to another status.

        Raises:
            HTTPException: 502 with the transition outcome if the backend refused it
        """
        logger.info(f"Status change requested for order {order_id} to {status}")
        result = await app.state.context.transitions.change_status(order_id, status)

        response = StatusTransitionResponse(
            order_id=result.order_id,
            target_status=result.target_status,
            success=result.success,
            applied_locally=result.applied_locally,
            error_message=result.error_message,
        )

        if not result.success:
            raise HTTPException(status_code=502, detail=response.model_dump())

        return response

    @app.post("/auth/login", response_model=StaffUser, tags=["Auth"])
    async def login(request: LoginRequest) -> StaffUser:
        """Log a staff member in with HTTP Basic credentials.

        Raises:
            HTTPException: 401 for rejected credentials, 502 if the backend is unreachable
        """
        try:
            user: StaffUser = await app.state.context.auth.login(request.username, request.password)
        except BackendUnauthorizedError as e:
            raise HTTPException(status_code=401, detail=str(e)) from e
        except BackendError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        return user

    @app.post("/auth/logout", response_model=LogoutResponse, tags=["Auth"])
    async def logout() -> LogoutResponse:
        app.state.context.auth.logout()
        return LogoutResponse(status="logged_out")

    @app.get("/auth/me", response_model=StaffUser, tags=["Auth"])
    async def current_user() -> StaffUser:
        """The logged-in staff member.

        Raises:
            HTTPException: 401 if nobody is logged in
        """
        user: StaffUser | None = app.state.context.auth.user
        if user is None:
            raise HTTPException(status_code=401, detail="Not logged in")
        return user

    # QR handlers are plain functions so FastAPI renders images in its threadpool
    @app.get("/admin/qr/menu.png", tags=["QR Codes"])
    def menu_qr(_staff: StaffUser | None = Depends(staff_session)) -> Response:
        content = render_qr_png(menu_url(app.state.context.settings.public_base_url))
        return _png(content, MENU_QR_FILENAME)

    @app.get("/admin/qr/menu/poster.png", tags=["QR Codes"])
    def menu_poster(_staff: StaffUser | None = Depends(staff_session)) -> Response:
        content = render_menu_poster(app.state.context.settings.public_base_url)
        return _png(content, MENU_POSTER_FILENAME)

    @app.get("/admin/qr/tables.zip", tags=["QR Codes"])
    def table_qr_archive(
        count: int = Query(10, ge=1, le=100),
        posters: bool = False,
        _staff: StaffUser | None = Depends(staff_session),
    ) -> Response:
        """ZIP of QR codes for tables 1..count."""
        content = render_table_qr_archive(
            app.state.context.settings.public_base_url, count, posters=posters
        )
        return Response(
            content=content,
            media_type="application/zip",
            headers={"Content-Disposition": 'attachment; filename="projectbar-mesas-qr.zip"'},
        )

    @app.get("/admin/qr/tables/{table}.png", tags=["QR Codes"])
    def table_qr(
        table: int = Path(..., gt=0),
        _staff: StaffUser | None = Depends(staff_session),
    ) -> Response:
        url = table_order_url(app.state.context.settings.public_base_url, table)
        return _png(render_qr_png(url), table_qr_filename(table))

    @app.get("/admin/qr/tables/{table}/poster.png", tags=["QR Codes"])
    def table_poster(
        table: int = Path(..., gt=0),
        _staff: StaffUser | None = Depends(staff_session),
    ) -> Response:
        content = render_table_poster(app.state.context.settings.public_base_url, table)
        return _png(content, table_poster_filename(table))

    return app


def _require_table(segment: str) -> int:
    table_number = parse_table_number(segment)
    if table_number is None:
        raise HTTPException(status_code=404, detail=f"No table found for '{segment}'")
    return table_number


def _staff_snapshot(context: AppContext, status: str = ALL_FILTER, table: int | None = None) -> StaffOrdersResponse:
    feed = context.staff_feed
    return StaffOrdersResponse(
        orders=[OrderResponse.from_order(order) for order in feed.filter_orders(status, table)],
        counts=feed.counts_by_status(),
        error=feed.error,
        using_sample_data=feed.using_sample_data,
        last_refreshed_at=feed.last_refreshed_at,
        refresh_interval_seconds=context.settings.staff_poll_interval_seconds,
    )


def _png(content: bytes, filename: str) -> Response:
    headers: dict[str, Any] = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=content, media_type="image/png", headers=headers)
