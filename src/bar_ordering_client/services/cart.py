"""Session-scoped shopping cart.

The cart is a plain in-memory aggregate owned by one customer session. Every
mutation recomputes the total from the lines and then notifies subscribers,
so observers never see a total that disagrees with the items.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from decimal import Decimal

from bar_ordering_client.models.product_models import Product
from bar_ordering_client.services.order_service_client import OrderRequestLine

logger = logging.getLogger(__name__)

CartListener = Callable[["Cart"], None]


@dataclass(frozen=True)
class CartLine:
    """One product in the cart.

    Attributes:
        product: The product being ordered
        unit_price: Price per unit captured when the product was added
        quantity: Number of units, always positive
    """

    product: Product
    unit_price: Decimal
    quantity: int

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """Cart aggregate with a derived total.

    Lines are unique by product id and keep insertion order.
    """

    def __init__(self) -> None:
        self._lines: list[CartLine] = []
        self._total = Decimal("0")
        self.table_number: int | None = None
        self.client_name: str | None = None
        self._listeners: list[CartListener] = []

    @property
    def items(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def total(self) -> Decimal:
        return self._total

    @property
    def item_count(self) -> int:
        """Sum of quantities across all lines, used for badge counts."""
        return sum(line.quantity for line in self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a change callback; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def get_line(self, product_id: int) -> CartLine | None:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def add_item(self, product: Product, price: Decimal | float | str, quantity: int = 1) -> None:
        """Add units of a product, merging with an existing line.

        Args:
            product: Product to add
            price: Unit price for a new line; ignored when the line exists
            quantity: Units to add

        Raises:
            ValueError: If quantity is not a positive integer
        """
        _check_quantity(quantity)
        if quantity <= 0:
            raise ValueError(f"quantity must be a positive integer, got {quantity!r}")

        for index, line in enumerate(self._lines):
            if line.product_id == product.id:
                self._lines[index] = replace(line, quantity=line.quantity + quantity)
                break
        else:
            self._lines.append(
                CartLine(product=product, unit_price=Decimal(str(price)), quantity=quantity)
            )

        self._changed()

    def remove_item(self, product_id: int) -> None:
        """Remove a product's line; absent products are ignored."""
        self._lines = [line for line in self._lines if line.product_id != product_id]
        self._changed()

    def update_quantity(self, product_id: int, quantity: int) -> None:
        """Overwrite a line's quantity; zero or less removes the line.

        Raises:
            ValueError: If quantity is not an integer
        """
        _check_quantity(quantity)
        if quantity <= 0:
            self.remove_item(product_id)
            return

        self._lines = [
            replace(line, quantity=quantity) if line.product_id == product_id else line
            for line in self._lines
        ]
        self._changed()

    def clear_cart(self) -> None:
        """Empty the cart and forget the table and client name."""
        self._lines = []
        self.table_number = None
        self.client_name = None
        self._changed()

    def set_table_number(self, table_number: int) -> None:
        self.table_number = table_number
        self._notify()

    def set_client_name(self, client_name: str) -> None:
        self.client_name = client_name
        self._notify()

    def to_order_lines(self) -> list[OrderRequestLine]:
        return [OrderRequestLine(product_id=line.product_id, quantity=line.quantity) for line in self._lines]

    def _changed(self) -> None:
        self._total = sum((line.subtotal for line in self._lines), Decimal("0"))
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


def _check_quantity(quantity: object) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValueError(f"quantity must be an integer, got {quantity!r}")
