"""Order models and the normalization boundary for upstream order DTOs.

The backend serves orders under several overlapping shapes: the client name
may arrive as ``clientName`` or ``customerName``, the timestamp as ``date`` or
``orderDate``, the amount as ``valueToPay`` or ``total`` and the lines as
``products`` or ``orderItems``. ``Order.from_api_payload`` is the only place
that knows about these aliases; everything downstream works on ``Order``.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderStatus(str, Enum):
    """Order lifecycle stages reported by the backend."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


UNKNOWN_STATUS = "UNKNOWN"

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
ACTIVE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.IN_PROGRESS, OrderStatus.READY})

# Staff actions offered per status; the backend remains the authority.
NEXT_STATUSES: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED),
    OrderStatus.IN_PROGRESS: (OrderStatus.READY, OrderStatus.CANCELLED),
    OrderStatus.READY: (OrderStatus.DELIVERED,),
}


def parse_order_status(value: str) -> OrderStatus | None:
    """Return the OrderStatus for a raw status string, or None if unknown."""
    try:
        return OrderStatus(value.strip().upper())
    except ValueError:
        return None


def next_statuses(status: str) -> tuple[OrderStatus, ...]:
    """Statuses a staff member can move an order to from ``status``."""
    known = parse_order_status(status)
    if known is None:
        return ()
    return NEXT_STATUSES.get(known, ())


@dataclass(frozen=True)
class StatusBadge:
    """Display hints for an order status.

    Attributes:
        label: Human readable status label
        variant: Badge colour family (default, warning, info, success, danger)
    """

    label: str
    variant: str


_STATUS_BADGES: dict[OrderStatus, StatusBadge] = {
    OrderStatus.PENDING: StatusBadge(label="Pending", variant="warning"),
    OrderStatus.IN_PROGRESS: StatusBadge(label="In preparation", variant="info"),
    OrderStatus.READY: StatusBadge(label="Ready", variant="success"),
    OrderStatus.DELIVERED: StatusBadge(label="Delivered", variant="default"),
    OrderStatus.CANCELLED: StatusBadge(label="Cancelled", variant="danger"),
}


def status_badge(status: str) -> StatusBadge:
    """Badge for a status; unknown statuses get a plain default badge."""
    known = parse_order_status(status)
    if known is None:
        return StatusBadge(label=status or UNKNOWN_STATUS, variant="default")
    return _STATUS_BADGES[known]


class OrderLine(BaseModel):
    """A product line inside an order."""

    model_config = ConfigDict(frozen=True)

    product_id: int | None = Field(None, description="Product identifier, missing once the product is deleted")
    quantity: int = Field(..., description="Ordered quantity", ge=0)
    product_name: str | None = Field(None, description="Product name when the backend sends it")
    unit_price: Decimal | None = Field(None, description="Price per unit", ge=0)
    line_id: int | None = Field(None, description="Order item identifier for staff edits")

    @property
    def subtotal(self) -> Decimal | None:
        if self.unit_price is None:
            return None
        return self.unit_price * self.quantity

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "OrderLine":
        """Create an OrderLine from an OrderProductDto or OrderItemDto."""
        return cls(
            product_id=_first_present(data, "productId", "idProduct"),
            quantity=data.get("quantity") or 0,
            product_name=data.get("productName"),
            unit_price=_to_decimal(_first_present(data, "unitPrice", "price")),
            line_id=data.get("id"),
        )


class Order(BaseModel):
    """Canonical client-side projection of a server-owned order.

    The status is kept as the raw (upper-cased) string so that statuses this
    client does not know about still display; compare it against
    ``OrderStatus`` members directly.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Order identifier")
    status: str = Field(default=UNKNOWN_STATUS, description="Lifecycle status as reported")
    client_name: str | None = Field(None, description="Customer name")
    table_number: int | None = Field(None, description="Table the order belongs to")
    waiter_username: str | None = Field(None, description="Waiter assigned to the order")
    notes: str | None = Field(None, description="Free-text notes")
    created_at: datetime | None = Field(None, description="Creation timestamp (UTC)")
    amount_due: Decimal | None = Field(None, description="Amount to pay")
    lines: tuple[OrderLine, ...] = Field(default=(), description="Ordered products")

    @field_validator("status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        """Upper-case the status and replace blanks with UNKNOWN."""
        return _normalize_status(v)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat naive timestamps from the backend as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def lifecycle_status(self) -> OrderStatus | None:
        return parse_order_status(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.lifecycle_status in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        return self.lifecycle_status in ACTIVE_STATUSES

    @property
    def badge(self) -> StatusBadge:
        return status_badge(self.status)

    @property
    def sort_timestamp(self) -> datetime:
        return self.created_at or datetime.min.replace(tzinfo=UTC)

    def with_status(self, status: str) -> "Order":
        """Return a copy carrying a different status."""
        return self.model_copy(update={"status": _normalize_status(status)})

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "Order":
        """Create an Order from any upstream order DTO shape.

        Args:
            data: OrderDto or OrderDetailDto dictionary

        Returns:
            Order: Canonical order

        Raises:
            KeyError: If the payload has no ``id``
        """
        raw_lines = data.get("orderItems") or data.get("products") or []

        return cls(
            id=data["id"],
            status=str(data.get("status") or UNKNOWN_STATUS),
            client_name=_first_present(data, "clientName", "customerName"),
            table_number=data.get("tableNumber"),
            waiter_username=data.get("waiterUserName"),
            notes=data.get("notes"),
            created_at=parse_timestamp(_first_present(data, "orderDate", "date")),
            amount_due=_to_decimal(_first_present(data, "valueToPay", "total")),
            lines=tuple(OrderLine.from_api_payload(line) for line in raw_lines),
        )


class StaffOrderItem(BaseModel):
    """Product line for staff-created orders, addressed by product code."""

    product_code: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)

    def to_api_payload(self) -> dict[str, Any]:
        return {"productCode": self.product_code, "quantity": self.quantity}


class StaffOrderDraft(BaseModel):
    """Order created from the staff screens rather than a customer QR."""

    table_number: int = Field(..., gt=0)
    client_name: str | None = None
    waiter_id: str | None = None
    notes: str | None = None
    items: list[StaffOrderItem] = Field(default_factory=list)

    def to_api_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"tableNumber": self.table_number}

        if self.client_name is not None:
            payload["clientName"] = self.client_name

        if self.waiter_id is not None:
            payload["waiterId"] = self.waiter_id

        if self.notes is not None:
            payload["notes"] = self.notes

        if self.items:
            payload["orderItems"] = [item.to_api_payload() for item in self.items]

        return payload


class OrderUpdate(BaseModel):
    """Editable order header fields."""

    id: int
    client_name: str | None = None
    table_number: int | None = Field(None, gt=0)
    notes: str | None = None

    def to_api_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id}

        if self.client_name is not None:
            payload["clientName"] = self.client_name

        if self.table_number is not None:
            payload["tableNumber"] = self.table_number

        if self.notes is not None:
            payload["notes"] = self.notes

        return payload


def _normalize_status(value: str) -> str:
    return value.strip().upper() or UNKNOWN_STATUS


def _first_present(data: dict[str, Any], *keys: str) -> Any:
    # First non-null value among the aliases.
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 date or datetime, returning None when unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None
