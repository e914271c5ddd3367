"""Shared pytest fixtures and configuration for all tests."""

import asyncio
import os
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

# Keep src.main from building the real application during collection
os.environ.setdefault("ENVIRONMENT", "test")

from bar_ordering_client.models.product_models import Product  # noqa: E402


@pytest.fixture
def mojito() -> Product:
    """Fixture providing a cocktail product."""
    return Product(id=1, name="Mojito", category="COCKTAILS", price=Decimal("8.5"))


@pytest.fixture
def beer() -> Product:
    """Fixture providing a beer product."""
    return Product(id=2, name="Club Colombia", category="BEER", price=Decimal("4.00"))


@pytest.fixture
def order_payloads() -> list[dict]:
    """Fixture providing backend order DTOs in the aliased shapes the API serves."""
    return [
        {
            "id": 10,
            "status": "PENDING",
            "clientName": "Carlos",
            "tableNumber": 5,
            "date": "2024-06-01T20:15:00",
            "total": 17.0,
            "products": [{"idProduct": 1, "quantity": 2, "price": 8.5}],
        },
        {
            "id": 11,
            "status": "READY",
            "customerName": "Lucia",
            "tableNumber": 5,
            "orderDate": "2024-06-01T20:45:00",
            "valueToPay": 12.0,
            "orderItems": [{"id": 3, "productId": 2, "productName": "Club Colombia", "quantity": 3}],
        },
        {
            "id": 12,
            "status": "DELIVERED",
            "clientName": "Marta",
            "tableNumber": 2,
            "date": "2024-06-01T19:00:00",
            "total": 9.0,
        },
    ]


@pytest.fixture
def staff_user_payload() -> dict:
    """Fixture providing an auth/me response."""
    return {"username": "mesero1", "email": "mesero1@bar.test", "roles": ["WAITER"]}


def make_response(status_code: int = 200, json_data: object = None, content: bytes | None = None) -> MagicMock:
    """Build a mock httpx response the way the backend client reads it."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    if content is not None:
        response.content = content
    else:
        response.content = b"" if json_data is None else b"{}"
    response.text = ""
    return response


@pytest.fixture
def response_factory() -> Callable[..., MagicMock]:
    """Fixture exposing make_response."""
    return make_response


class FakeClock:
    """Virtual clock whose sleep() only returns when advance() passes its deadline."""

    def __init__(self) -> None:
        self.now = 0.0
        self._sleepers: list[tuple[float, asyncio.Future]] = []

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self._sleepers.append((self.now + seconds, future))
        await future

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            await settle()
            due = [entry for entry in self._sleepers if entry[0] <= target and not entry[1].done()]
            if not due:
                break
            deadline, future = min(due, key=lambda entry: entry[0])
            self._sleepers.remove((deadline, future))
            self.now = deadline
            future.set_result(None)
        self.now = target
        await settle()


async def settle(rounds: int = 10) -> None:
    """Let every ready task run until it blocks again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def fake_clock() -> FakeClock:
    """Fixture providing a virtual clock for polling tests."""
    return FakeClock()


@pytest.fixture
def settle_tasks() -> Callable[[], Awaitable[None]]:
    """Fixture exposing settle()."""
    return settle


@pytest.fixture
def fixed_now() -> datetime:
    """Fixture providing a fixed reference time."""
    return datetime(2024, 6, 1, 21, 0, tzinfo=UTC)
