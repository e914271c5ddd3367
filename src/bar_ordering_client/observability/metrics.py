"""Custom metrics for the ordering client."""

from opentelemetry import metrics

SERVICE_NAME = "bar-ordering-client"

meter = metrics.get_meter(SERVICE_NAME)

orders_submitted_counter = meter.create_counter(
    name="orders_submitted_total",
    description="Total number of customer orders accepted by the backend",
    unit="1",
)

order_lines_counter = meter.create_counter(
    name="order_lines_submitted_total",
    description="Total number of product lines in accepted customer orders",
    unit="1",
)

orders_rejected_counter = meter.create_counter(
    name="orders_rejected_total",
    description="Total number of order submissions rejected before any request",
    unit="1",
)

orders_failed_counter = meter.create_counter(
    name="orders_failed_total",
    description="Total number of order submissions that failed at the backend",
    unit="1",
)

order_poll_failure_counter = meter.create_counter(
    name="order_poll_failure_total",
    description="Total number of failed order feed refreshes by scope",
    unit="1",
)

status_transition_counter = meter.create_counter(
    name="order_status_transition_total",
    description="Total number of status change requests by outcome",
    unit="1",
)

backend_response_time = meter.create_histogram(
    name="backend_response_time_seconds",
    description="Response time for ordering backend calls",
    unit="s",
)


def record_order_submitted(table_number: int, line_count: int) -> None:
    """Record an order accepted by the backend.

    Args:
        table_number: Table the order was placed from
        line_count: Number of product lines in the order
    """
    orders_submitted_counter.add(1, {"table_number": str(table_number)})
    order_lines_counter.add(line_count)


def record_order_rejected(reason: str) -> None:
    """Record a submission stopped by local validation.

    Args:
        reason: Short validation failure code
    """
    orders_rejected_counter.add(1, {"reason": reason})


def record_order_failed(error_type: str) -> None:
    """Record a submission the backend did not accept.

    Args:
        error_type: Exception class name
    """
    orders_failed_counter.add(1, {"error_type": error_type})


def record_poll_failure(scope: str, error_type: str) -> None:
    """Record a failed order feed refresh.

    Args:
        scope: "staff" or "table"
        error_type: Exception class name
    """
    order_poll_failure_counter.add(1, {"scope": scope, "error_type": error_type})


def record_status_transition(target_status: str, outcome: str) -> None:
    """Record a status change request.

    Args:
        target_status: Requested status
        outcome: "accepted", "failed" or "applied_locally"
    """
    status_transition_counter.add(1, {"target_status": target_status, "outcome": outcome})


def record_backend_call(operation: str, duration_seconds: float) -> None:
    """Record the duration of a backend call.

    Args:
        operation: Operation name (e.g., "orders.list_orders")
        duration_seconds: Duration in seconds
    """
    backend_response_time.record(duration_seconds, {"operation": operation})
