"""Unit tests for the product, order and bill clients."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from bar_ordering_client.errors import BackendResponseError, BackendUnavailableError
from bar_ordering_client.models.order_models import (
    OrderStatus,
    OrderUpdate,
    StaffOrderDraft,
    StaffOrderItem,
)
from bar_ordering_client.models.product_models import ProductCategory, ProductDraft
from bar_ordering_client.services.backend_client import BackendClient
from bar_ordering_client.services.bill_service_client import BillServiceClient
from bar_ordering_client.services.order_service_client import OrderRequestLine, OrderServiceClient
from bar_ordering_client.services.product_service_client import ProductServiceClient

BASE = "http://backend.test/api"


@pytest.fixture
def backend() -> BackendClient:
    """Create a BackendClient with test configuration."""
    return BackendClient(base_url="http://backend.test")


@pytest.mark.unit
class TestProductServiceClient:
    """Test suite for ProductServiceClient."""

    @pytest.fixture
    def client(self, backend: BackendClient) -> ProductServiceClient:
        return ProductServiceClient(backend)

    @pytest.mark.asyncio
    async def test_list_products(
        self, client: ProductServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test listing the full catalog."""
        payload = [
            {"id": 1, "name": "Mojito", "category": "COCKTAILS", "price": 8.5},
            {"id": 2, "name": "Club Colombia", "category": "BEER", "price": 4},
        ]
        mock_request = AsyncMock(return_value=response_factory(200, payload))

        with patch("httpx.AsyncClient.request", mock_request):
            products = await client.list_products()

        assert [p.name for p in products] == ["Mojito", "Club Colombia"]
        assert products[0].price == Decimal("8.5")
        assert mock_request.call_args.args == ("GET", f"{BASE}/product/all")

    @pytest.mark.asyncio
    async def test_list_by_category_upper_cases_name(
        self, client: ProductServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that category names are sent upper-cased."""
        mock_request = AsyncMock(return_value=response_factory(200, []))

        with patch("httpx.AsyncClient.request", mock_request):
            assert await client.list_by_category("cocktails") == []

        assert mock_request.call_args.args[1] == f"{BASE}/product/find-by-category/COCKTAILS"

    @pytest.mark.asyncio
    async def test_list_available_products_filters_unavailable(
        self, client: ProductServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that the customer menu hides unavailable products."""
        payload = [
            {"id": 1, "name": "Mojito", "available": True},
            {"id": 2, "name": "Sangria", "available": False},
            {"id": 3, "name": "Limonada"},
        ]

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=response_factory(200, payload)):
            products = await client.list_available_products()

        assert [p.id for p in products] == [1, 3]

    @pytest.mark.asyncio
    async def test_lookups_quote_path_segments(
        self, client: ProductServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test lookups by code and by name."""
        mock_request = AsyncMock(return_value=response_factory(200, {"id": 1, "name": "Piña Colada"}))

        with patch("httpx.AsyncClient.request", mock_request):
            product = await client.get_by_code("PC 1")

        assert product.name == "Piña Colada"
        assert mock_request.call_args.args[1] == f"{BASE}/product/find-by-code/PC%201"

    @pytest.mark.asyncio
    async def test_create_product_sends_draft(
        self, client: ProductServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test product creation payload."""
        draft = ProductDraft(name="Mojito", code="MOJ", price=Decimal("8.5"), category=ProductCategory.COCKTAILS)
        mock_request = AsyncMock(return_value=response_factory(200, {"id": 9, "name": "Mojito"}))

        with patch("httpx.AsyncClient.request", mock_request):
            product = await client.create_product(draft)

        assert product.id == 9
        assert mock_request.call_args.args == ("POST", f"{BASE}/product/save")
        assert mock_request.call_args.kwargs["json"]["code"] == "MOJ"

    @pytest.mark.asyncio
    async def test_list_inventory_and_ingredients(
        self, client: ProductServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test the inventory and ingredient listings."""
        mock_request = AsyncMock(
            side_effect=[
                response_factory(200, [{"id": 1, "quantity": 3}]),
                response_factory(200, [{"id": 2, "name": "Ron"}]),
            ]
        )

        with patch("httpx.AsyncClient.request", mock_request):
            inventory = await client.list_inventory()
            ingredients = await client.list_ingredients()

        assert inventory[0].quantity == 3
        assert ingredients[0].name == "Ron"
        assert [c.args[1] for c in mock_request.call_args_list] == [
            f"{BASE}/inventory/all",
            f"{BASE}/ingredient/all",
        ]


@pytest.mark.unit
class TestOrderServiceClient:
    """Test suite for OrderServiceClient."""

    @pytest.fixture
    def client(self, backend: BackendClient) -> OrderServiceClient:
        return OrderServiceClient(backend)

    @pytest.mark.asyncio
    async def test_list_orders_normalizes_payloads(
        self,
        client: OrderServiceClient,
        order_payloads: list[dict],
        response_factory: Callable[..., MagicMock],
    ) -> None:
        """Test that every aliased order shape loads into Order."""
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=response_factory(200, order_payloads),
        ):
            orders = await client.list_orders()

        assert [o.client_name for o in orders] == ["Carlos", "Lucia", "Marta"]

    @pytest.mark.asyncio
    async def test_create_customer_order_payload(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test the customer order request body."""
        mock_request = AsyncMock(return_value=response_factory(200, {"id": 20, "status": "PENDING"}))

        with patch("httpx.AsyncClient.request", mock_request):
            order = await client.create_customer_order(
                table_number=5,
                client_name="Carlos",
                lines=[OrderRequestLine(product_id=1, quantity=2)],
            )

        assert order is not None
        assert order.id == 20
        assert mock_request.call_args.args == ("POST", f"{BASE}/order/save")
        assert mock_request.call_args.kwargs["json"] == {
            "tableNumber": 5,
            "clientName": "Carlos",
            "products": [{"idProduct": 1, "quantity": 2}],
        }

    @pytest.mark.asyncio
    async def test_create_customer_order_without_body(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that an empty acknowledgement yields None."""
        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=response_factory(200)):
            order = await client.create_customer_order(5, "Carlos", [OrderRequestLine(1, 1)])

        assert order is None

    @pytest.mark.asyncio
    async def test_create_customer_order_with_text_acknowledgement(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that a plain-text acknowledgement is a success without an order."""
        response = response_factory(201, content=b"Order created")
        response.json.side_effect = ValueError("Expecting value")
        response.text = "Order created"

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=response):
            order = await client.create_customer_order(5, "Carlos", [OrderRequestLine(1, 1)])

        assert order is None

    @pytest.mark.asyncio
    async def test_list_orders_tolerates_deleted_products_and_skips_unreadable(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that a line without a product id loads and an order without an id is skipped."""
        payload = [
            {"id": 1, "status": "PENDING", "products": [{"productId": None, "quantity": 1}]},
            {"status": "READY"},
            {"id": 3, "status": "READY", "orderItems": [{"productId": 4, "quantity": None}]},
        ]

        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=response_factory(200, payload),
        ):
            orders = await client.list_orders()

        assert [o.id for o in orders] == [1, 3]
        assert orders[0].lines[0].product_id is None
        assert orders[1].lines[0].quantity == 0

    @pytest.mark.asyncio
    async def test_list_orders_rejects_non_list_body(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that a body that is not an order list is a backend error."""
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=response_factory(200, {"message": "maintenance"}),
        ):
            with pytest.raises(BackendResponseError):
                await client.list_orders()

    @pytest.mark.asyncio
    async def test_change_status_path(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that status changes are PUT without client-side checks."""
        mock_request = AsyncMock(return_value=response_factory(200))

        with patch("httpx.AsyncClient.request", mock_request):
            await client.change_status(7, OrderStatus.READY)
            await client.change_status(7, "delivered")

        assert [c.args for c in mock_request.call_args_list] == [
            ("PUT", f"{BASE}/order/change-status/7/READY"),
            ("PUT", f"{BASE}/order/change-status/7/DELIVERED"),
        ]

    @pytest.mark.asyncio
    async def test_lookup_paths(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test the lookup endpoints by table, client, waiter and date."""
        mock_request = AsyncMock(return_value=response_factory(200, []))

        with patch("httpx.AsyncClient.request", mock_request):
            await client.list_by_table(5)
            await client.list_by_client("Juan García")
            await client.list_by_waiter("mesero1")
            await client.list_by_date(date(2024, 6, 1))

        assert [c.args[1] for c in mock_request.call_args_list] == [
            f"{BASE}/order/find-by-table-number/5",
            f"{BASE}/order/find-by-client-name/Juan%20Garc%C3%ADa",
            f"{BASE}/order/find-by-waiter-id/mesero1",
            f"{BASE}/order/find-by-date/2024-06-01",
        ]

    @pytest.mark.asyncio
    async def test_staff_order_management(
        self, client: OrderServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test staff create, update, add-item, remove-item and delete calls."""
        mock_request = AsyncMock(return_value=response_factory(200, {"id": 4, "status": "PENDING"}))
        draft = StaffOrderDraft(table_number=4, items=[StaffOrderItem(product_code="MOJ", quantity=1)])

        with patch("httpx.AsyncClient.request", mock_request):
            await client.create_staff_order(draft)
            await client.update_order(OrderUpdate(id=4, notes="Sin hielo"))
            await client.add_item(4, StaffOrderItem(product_code="CER", quantity=2))
            await client.remove_item(4, 11, 1)
            await client.delete_order(4)

        assert [c.args for c in mock_request.call_args_list] == [
            ("POST", f"{BASE}/order/save"),
            ("PUT", f"{BASE}/order/update"),
            ("PUT", f"{BASE}/order/add-order-item/4"),
            ("PUT", f"{BASE}/order/remove-order-item/4/11/1"),
            ("DELETE", f"{BASE}/order/delete/4"),
        ]
        assert mock_request.call_args_list[2].kwargs["json"] == {"productCode": "CER", "quantity": 2}

    @pytest.mark.asyncio
    async def test_errors_propagate(self, client: OrderServiceClient) -> None:
        """Test that the client does not swallow backend failures."""
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("down", request=MagicMock()),
        ):
            with pytest.raises(BackendUnavailableError):
                await client.list_orders()


@pytest.mark.unit
class TestBillServiceClient:
    """Test suite for BillServiceClient."""

    @pytest.fixture
    def client(self, backend: BackendClient) -> BillServiceClient:
        return BillServiceClient(backend)

    @pytest.mark.asyncio
    async def test_generate_bills(
        self, client: BillServiceClient, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test the three ways of generating a bill."""
        mock_request = AsyncMock(return_value=response_factory(200, {"id": 1, "totalAmount": 20}))

        with patch("httpx.AsyncClient.request", mock_request):
            await client.generate_for_table(5, "Carlos")
            await client.generate_for_client("Carlos")
            bill = await client.generate_for_orders([10, 11])

        assert bill.total_amount == Decimal("20")
        assert [c.args for c in mock_request.call_args_list] == [
            ("POST", f"{BASE}/bill/save/by-table/5/Carlos"),
            ("POST", f"{BASE}/bill/save/by-client/Carlos"),
            ("POST", f"{BASE}/bill/save/by-selection"),
        ]
        assert mock_request.call_args_list[2].kwargs["json"] == {"ordersId": [10, 11]}

    @pytest.mark.asyncio
    async def test_generate_for_orders_requires_selection(self, client: BillServiceClient) -> None:
        """Test that an empty selection is rejected before any request."""
        mock_request = AsyncMock()

        with patch("httpx.AsyncClient.request", mock_request):
            with pytest.raises(ValueError):
                await client.generate_for_orders([])

        mock_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_pdf(
        self, client: BillServiceClient, tmp_path: Path, response_factory: Callable[..., MagicMock]
    ) -> None:
        """Test that PDFs are written as factura_{id}.pdf."""
        response = response_factory(200, content=b"%PDF-1.7")

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=response):
            target = await client.save_pdf(7, tmp_path / "bills")

        assert target == tmp_path / "bills" / "factura_7.pdf"
        assert target.read_bytes() == b"%PDF-1.7"
