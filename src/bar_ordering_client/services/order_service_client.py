"""Client for the order endpoints of the ordering backend."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

from pydantic import ValidationError

from bar_ordering_client.errors import BackendResponseError
from bar_ordering_client.models.order_models import (
    Order,
    OrderStatus,
    OrderUpdate,
    StaffOrderDraft,
    StaffOrderItem,
)
from bar_ordering_client.observability import traced
from bar_ordering_client.services.backend_client import BackendClient, path_segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderRequestLine:
    """A product and quantity a customer wants to order.

    Attributes:
        product_id: Product identifier
        quantity: Number of units, must be positive
    """

    product_id: int
    quantity: int


class OrderServiceClient:
    """HTTP client for reading and mutating orders.

    All responses are normalized through ``Order.from_api_payload``, so the
    aliased upstream fields never leak past this class.
    """

    def __init__(self, backend: BackendClient) -> None:
        """Initialize the order client.

        Args:
            backend: Shared backend HTTP client
        """
        self.backend = backend

    @traced("orders.list_orders")
    async def list_orders(self) -> list[Order]:
        data = await self.backend.get("order/all")
        return _parse_orders(data)

    @traced("orders.get_order")
    async def get_order(self, order_id: int) -> Order:
        data = await self.backend.get(f"order/find-by-id/{order_id}")
        return Order.from_api_payload(data)

    @traced("orders.list_by_client")
    async def list_by_client(self, client_name: str) -> list[Order]:
        data = await self.backend.get(f"order/find-by-client-name/{path_segment(client_name)}")
        return _parse_orders(data)

    @traced("orders.list_by_table")
    async def list_by_table(self, table_number: int) -> list[Order]:
        data = await self.backend.get(f"order/find-by-table-number/{table_number}")
        return _parse_orders(data)

    @traced("orders.list_by_waiter")
    async def list_by_waiter(self, waiter_id: str) -> list[Order]:
        data = await self.backend.get(f"order/find-by-waiter-id/{path_segment(waiter_id)}")
        return _parse_orders(data)

    @traced("orders.list_by_date")
    async def list_by_date(self, day: date | str) -> list[Order]:
        value = day.isoformat() if isinstance(day, date) else day
        data = await self.backend.get(f"order/find-by-date/{path_segment(value)}")
        return _parse_orders(data)

    @traced("orders.create_customer_order")
    async def create_customer_order(
        self,
        table_number: int,
        client_name: str,
        lines: list[OrderRequestLine],
    ) -> Order | None:
        """Create an order placed from a table's QR menu.

        Args:
            table_number: Table the order is for
            client_name: Customer name
            lines: Products and quantities

        Returns:
            The created order, or None if the backend acknowledged without a body
        """
        payload = {
            "tableNumber": table_number,
            "clientName": client_name,
            "products": [
                {"idProduct": line.product_id, "quantity": line.quantity} for line in lines
            ],
        }
        data = await self.backend.post("order/save", json=payload)
        return _parse_optional_order(data)

    @traced("orders.create_staff_order")
    async def create_staff_order(self, draft: StaffOrderDraft) -> Order | None:
        data = await self.backend.post("order/save", json=draft.to_api_payload())
        return _parse_optional_order(data)

    @traced("orders.update_order")
    async def update_order(self, update: OrderUpdate) -> Order | None:
        data = await self.backend.put("order/update", json=update.to_api_payload())
        return _parse_optional_order(data)

    @traced("orders.add_item")
    async def add_item(self, order_id: int, item: StaffOrderItem) -> Order | None:
        data = await self.backend.put(f"order/add-order-item/{order_id}", json=item.to_api_payload())
        return _parse_optional_order(data)

    @traced("orders.remove_item")
    async def remove_item(self, order_id: int, item_id: int, quantity: int) -> Order | None:
        data = await self.backend.put(f"order/remove-order-item/{order_id}/{item_id}/{quantity}")
        return _parse_optional_order(data)

    @traced("orders.change_status")
    async def change_status(self, order_id: int, status: OrderStatus | str) -> Order | None:
        """Ask the backend to move an order to another status.

        No check is made that the transition is legal; the backend decides.

        Args:
            order_id: Order to update
            status: Target status

        Returns:
            The updated order when the backend returns it, None otherwise
        """
        value = status.value if isinstance(status, OrderStatus) else status.strip().upper()
        data = await self.backend.put(f"order/change-status/{order_id}/{path_segment(value)}")
        logger.info(f"Order {order_id} status change to {value} accepted")
        return _parse_optional_order(data)

    @traced("orders.delete_order")
    async def delete_order(self, order_id: int) -> None:
        await self.backend.delete(f"order/delete/{order_id}")
        logger.info(f"Order {order_id} deleted")


def _parse_orders(data: Any) -> list[Order]:
    """Normalize a list of order DTOs, skipping entries that cannot be read.

    Raises:
        BackendResponseError: If the body is not a list at all
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise BackendResponseError("Unexpected order list from the ordering service", status_code=200)

    orders = []
    for item in data:
        try:
            orders.append(Order.from_api_payload(item))
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            logger.warning(f"Skipping unreadable order payload: {e}")
    return orders


def _parse_optional_order(data: Any) -> Order | None:
    if not isinstance(data, dict) or "id" not in data:
        return None
    try:
        return Order.from_api_payload(data)
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable order in response: {e}")
        return None
