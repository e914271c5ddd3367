"""Service for submitting customer table orders."""

import logging
from dataclasses import dataclass

from bar_ordering_client.errors import BackendError
from bar_ordering_client.models.order_models import Order
from bar_ordering_client.observability.metrics import (
    record_order_failed,
    record_order_rejected,
    record_order_submitted,
)
from bar_ordering_client.routes import confirmation_path
from bar_ordering_client.services.cart import Cart
from bar_ordering_client.services.order_service_client import OrderRequestLine, OrderServiceClient

logger = logging.getLogger(__name__)

MIN_CLIENT_NAME_LENGTH = 4


@dataclass(frozen=True)
class OrderValidationError:
    """A submission problem found before any request was sent.

    Attributes:
        code: Short machine-readable reason
        message: Human readable explanation
    """

    code: str
    message: str


@dataclass
class SubmissionResult:
    """Result of one order submission attempt.

    Attributes:
        success: Whether the backend accepted the order
        table_number: Table the order was for
        order: The created order when the backend returned it
        error_message: Human readable failure, None on success
        validation_error: True when the order never left the client
    """

    success: bool
    table_number: int | None
    order: Order | None = None
    error_message: str | None = None
    validation_error: bool = False

    @property
    def confirmation_path(self) -> str | None:
        if not self.success or self.table_number is None:
            return None
        return confirmation_path(self.table_number)


def validate_order_request(
    table_number: object,
    client_name: str | None,
    lines: list[OrderRequestLine],
) -> OrderValidationError | None:
    """Check a submission before it is sent.

    Args:
        table_number: Table number from the scanned code
        client_name: Name the customer typed
        lines: Products and quantities

    Returns:
        The first problem found, or None if the request is valid
    """
    if isinstance(table_number, bool) or not isinstance(table_number, int) or table_number <= 0:
        return OrderValidationError("invalid_table", "A valid table number is required")

    name = (client_name or "").strip()
    if not name:
        return OrderValidationError("missing_name", "Please enter your name")

    if len(name) < MIN_CLIENT_NAME_LENGTH:
        return OrderValidationError(
            "short_name", f"Name must be at least {MIN_CLIENT_NAME_LENGTH} characters"
        )

    if not lines:
        return OrderValidationError("empty_cart", "Your cart is empty")

    if any(line.quantity <= 0 for line in lines):
        return OrderValidationError("invalid_quantity", "Quantities must be positive")

    return None


class OrderSubmissionService:
    """Sends customer orders to the backend, once per user action.

    Submissions are not idempotent. While one is in flight further calls are
    refused, which only protects against double taps on this client.
    """

    def __init__(self, order_client: OrderServiceClient) -> None:
        """Initialize the submission service.

        Args:
            order_client: Client for the order endpoints
        """
        self.order_client = order_client
        self.submitting = False

    async def submit(
        self,
        table_number: int,
        client_name: str,
        lines: list[OrderRequestLine],
    ) -> SubmissionResult:
        """Validate and submit an order.

        Args:
            table_number: Table the order is for
            client_name: Customer name, at least four characters once trimmed
            lines: Products and quantities

        Returns:
            SubmissionResult describing the outcome; never raises for backend failures
        """
        problem = validate_order_request(table_number, client_name, lines)
        if problem is not None:
            logger.info(f"Order for table {table_number} rejected locally: {problem.code}")
            record_order_rejected(problem.code)
            return SubmissionResult(
                success=False,
                table_number=table_number if isinstance(table_number, int) else None,
                error_message=problem.message,
                validation_error=True,
            )

        if self.submitting:
            return SubmissionResult(
                success=False,
                table_number=table_number,
                error_message="An order is already being sent",
            )

        self.submitting = True
        try:
            order = await self.order_client.create_customer_order(
                table_number=table_number,
                client_name=client_name.strip(),
                lines=lines,
            )
        except BackendError as e:
            logger.error(f"Failed to submit order for table {table_number}: {e}")
            record_order_failed(type(e).__name__)
            return SubmissionResult(
                success=False,
                table_number=table_number,
                error_message=str(e) or "The order could not be sent",
            )
        finally:
            self.submitting = False

        record_order_submitted(table_number, len(lines))
        logger.info(f"Order submitted for table {table_number} with {len(lines)} lines")
        return SubmissionResult(success=True, table_number=table_number, order=order)

    async def submit_cart(self, cart: Cart) -> SubmissionResult:
        """Submit the cart's contents and clear it once the backend accepts.

        On failure the cart is left untouched so the customer can retry.

        Args:
            cart: Cart carrying the table number and client name

        Returns:
            SubmissionResult describing the outcome
        """
        result = await self.submit(
            table_number=cart.table_number,  # type: ignore[arg-type]
            client_name=cart.client_name or "",
            lines=cart.to_order_lines(),
        )

        if result.success:
            cart.clear_cart()

        return result
