"""Static orders shown when the staff feed is configured to fall back to sample data."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from bar_ordering_client.models.order_models import Order, OrderStatus


def sample_orders(now: datetime | None = None) -> list[Order]:
    """Build the demonstration order set.

    Args:
        now: Reference time for the creation timestamps, defaults to the current UTC time

    Returns:
        Three orders spread across tables and statuses
    """
    now = now or datetime.now(UTC)

    return [
        Order(
            id=1,
            status=OrderStatus.IN_PROGRESS.value,
            client_name="Juan García",
            table_number=2,
            created_at=now - timedelta(minutes=15),
            amount_due=Decimal("32.50"),
        ),
        Order(
            id=2,
            status=OrderStatus.READY.value,
            client_name="Ana Martínez",
            table_number=3,
            notes="Sin hielo",
            created_at=now - timedelta(minutes=8),
            amount_due=Decimal("18.00"),
        ),
        Order(
            id=3,
            status=OrderStatus.PENDING.value,
            client_name="Pedro López",
            table_number=6,
            created_at=now - timedelta(minutes=2),
            amount_due=Decimal("45.00"),
        ),
    ]
