"""Bill models returned by the billing endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from bar_ordering_client.models.order_models import Order, parse_timestamp


class Bill(BaseModel):
    """Bill generated by the backend for one or more orders."""

    id: int = Field(..., description="Bill identifier")
    total_amount: Decimal = Field(..., description="Total billed amount", ge=0)
    created_at: datetime | None = Field(None, description="Billing timestamp")
    client_name: str | None = Field(None, description="Customer the bill is for")
    orders: tuple[Order, ...] = Field(default=(), description="Orders covered by the bill")

    @property
    def pdf_filename(self) -> str:
        return bill_pdf_filename(self.id)

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "Bill":
        """Create a Bill from a backend BillDto.

        Args:
            data: BillDto dictionary

        Returns:
            Bill: Parsed model instance
        """
        return cls(
            id=data["id"],
            total_amount=Decimal(str(data.get("totalAmount", 0))),
            created_at=parse_timestamp(data.get("date")),
            client_name=data.get("clientName"),
            orders=tuple(Order.from_api_payload(order) for order in data.get("orders") or []),
        )


def bill_pdf_filename(bill_id: int) -> str:
    """File name used when saving a bill PDF."""
    return f"factura_{bill_id}.pdf"
