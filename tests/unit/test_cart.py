"""Unit tests for the Cart aggregate."""

import random
from decimal import Decimal

import pytest

from bar_ordering_client.models.product_models import Product
from bar_ordering_client.services.cart import Cart
from bar_ordering_client.services.order_service_client import OrderRequestLine


def _expected_total(cart: Cart) -> Decimal:
    return sum((line.unit_price * line.quantity for line in cart.items), Decimal("0"))


@pytest.mark.unit
class TestCartScenario:
    """Walk through the basic add, merge, update and remove flow."""

    def test_mojito_scenario(self, mojito: Product) -> None:
        """Test totals through the add, merge, update and remove sequence."""
        cart = Cart()

        cart.add_item(mojito, 8.5, 2)
        assert [(line.product_id, line.quantity) for line in cart.items] == [(1, 2)]
        assert cart.total == Decimal("17.0")

        cart.add_item(mojito, 8.5, 1)
        assert [(line.product_id, line.quantity) for line in cart.items] == [(1, 3)]
        assert cart.total == Decimal("25.5")

        cart.update_quantity(1, 1)
        assert cart.total == Decimal("8.5")

        cart.remove_item(1)
        assert cart.items == ()
        assert cart.total == 0


@pytest.mark.unit
class TestCartOperations:
    """Test suite for individual cart operations."""

    def test_empty_cart(self) -> None:
        """Test the initial cart state."""
        cart = Cart()

        assert cart.is_empty
        assert cart.item_count == 0
        assert cart.total == Decimal("0")

    def test_add_item_defaults_to_one(self, mojito: Product) -> None:
        """Test that quantity defaults to one."""
        cart = Cart()
        cart.add_item(mojito, "8.5")

        assert cart.get_line(1) is not None
        assert cart.get_line(1).quantity == 1  # type: ignore[union-attr]

    def test_merge_keeps_first_price(self, mojito: Product) -> None:
        """Test that adding an existing product only increases its quantity."""
        cart = Cart()
        cart.add_item(mojito, 8.5, 1)
        cart.add_item(mojito, 99, 1)

        assert cart.items[0].unit_price == Decimal("8.5")
        assert cart.total == Decimal("17.0")

    @pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
    def test_add_item_rejects_invalid_quantity(self, mojito: Product, quantity: object) -> None:
        """Test that non-positive or non-integer quantities are caller errors."""
        cart = Cart()

        with pytest.raises(ValueError):
            cart.add_item(mojito, 8.5, quantity)  # type: ignore[arg-type]

        assert cart.is_empty

    @pytest.mark.parametrize("quantity", [2.5, True, "3"])
    def test_update_quantity_rejects_non_integer(self, mojito: Product, quantity: object) -> None:
        """Test that update_quantity applies the same integer check as add_item."""
        cart = Cart()
        cart.add_item(mojito, 8.5, 2)

        with pytest.raises(ValueError):
            cart.update_quantity(1, quantity)  # type: ignore[arg-type]

        assert cart.items[0].quantity == 2
        assert cart.total == Decimal("17.0")

    def test_remove_absent_product_is_noop(self, mojito: Product) -> None:
        """Test that removing an unknown product leaves the cart unchanged."""
        cart = Cart()
        cart.add_item(mojito, 8.5, 2)

        cart.remove_item(999)

        assert cart.item_count == 2
        assert cart.total == Decimal("17.0")

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_update_quantity_non_positive_equals_remove(
        self, mojito: Product, beer: Product, quantity: int
    ) -> None:
        """Test that updating to zero or less behaves like remove_item."""
        updated = Cart()
        removed = Cart()
        for cart in (updated, removed):
            cart.add_item(mojito, 8.5, 2)
            cart.add_item(beer, 4, 1)

        updated.update_quantity(1, quantity)
        removed.remove_item(1)

        assert updated.items == removed.items
        assert updated.total == removed.total

    def test_add_then_remove_restores_prior_state(self, mojito: Product, beer: Product) -> None:
        """Test the add/remove round trip for a product not yet in the cart."""
        cart = Cart()
        cart.add_item(beer, 4, 2)
        before = (cart.items, cart.total)

        cart.add_item(mojito, 8.5, 3)
        cart.remove_item(mojito.id)

        assert (cart.items, cart.total) == before

    def test_item_count_sums_quantities(self, mojito: Product, beer: Product) -> None:
        """Test that item_count adds up quantities, not lines."""
        cart = Cart()
        cart.add_item(mojito, 8.5, 2)
        cart.add_item(beer, 4, 3)

        assert cart.item_count == 5
        assert len(cart.items) == 2

    def test_clear_cart_forgets_metadata(self, mojito: Product) -> None:
        """Test that clearing drops items, table and client name."""
        cart = Cart()
        cart.set_table_number(5)
        cart.set_client_name("Carlos")
        cart.add_item(mojito, 8.5, 2)

        cart.clear_cart()

        assert cart.is_empty
        assert cart.total == Decimal("0")
        assert cart.table_number is None
        assert cart.client_name is None

    def test_metadata_does_not_touch_items(self, mojito: Product) -> None:
        """Test that table and client setters leave the lines alone."""
        cart = Cart()
        cart.add_item(mojito, 8.5, 2)

        cart.set_table_number(3)
        cart.set_client_name("Lucia")

        assert cart.table_number == 3
        assert cart.client_name == "Lucia"
        assert cart.total == Decimal("17.0")

    def test_to_order_lines(self, mojito: Product, beer: Product) -> None:
        """Test conversion to submission lines in insertion order."""
        cart = Cart()
        cart.add_item(mojito, 8.5, 2)
        cart.add_item(beer, 4, 1)

        assert cart.to_order_lines() == [
            OrderRequestLine(product_id=1, quantity=2),
            OrderRequestLine(product_id=2, quantity=1),
        ]

    def test_subscribers_see_consistent_total(self, mojito: Product) -> None:
        """Test that listeners observe a total that matches the items."""
        cart = Cart()
        seen: list[tuple[Decimal, Decimal]] = []
        unsubscribe = cart.subscribe(lambda c: seen.append((c.total, _expected_total(c))))

        cart.add_item(mojito, 8.5, 2)
        cart.update_quantity(1, 4)
        unsubscribe()
        cart.remove_item(1)

        assert seen == [(Decimal("17.0"), Decimal("17.0")), (Decimal("34.0"), Decimal("34.0"))]


@pytest.mark.unit
class TestCartTotalInvariant:
    """The total always equals the sum of unit price times quantity."""

    @pytest.mark.parametrize("seed", range(20))
    def test_random_mutation_sequences(self, seed: int) -> None:
        """Test the total after every mutation of a random sequence."""
        rng = random.Random(seed)
        products = [
            Product(id=i, name=f"Product {i}", price=Decimal(rng.randint(1, 2000)) / 100)
            for i in range(1, 6)
        ]
        cart = Cart()

        for _ in range(50):
            product = rng.choice(products)
            operation = rng.choice(["add", "remove", "update"])
            if operation == "add":
                cart.add_item(product, product.price, rng.randint(1, 5))  # type: ignore[arg-type]
            elif operation == "remove":
                cart.remove_item(product.id)
            else:
                cart.update_quantity(product.id, rng.randint(-2, 6))

            assert cart.total == _expected_total(cart)
            assert cart.item_count == sum(line.quantity for line in cart.items)
            assert len({line.product_id for line in cart.items}) == len(cart.items)
