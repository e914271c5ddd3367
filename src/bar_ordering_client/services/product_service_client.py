"""Client for the product, inventory and ingredient endpoints."""

import logging
from typing import Any

from bar_ordering_client.models.product_models import (
    Ingredient,
    InventoryEntry,
    Product,
    ProductCategory,
    ProductDraft,
)
from bar_ordering_client.observability import traced
from bar_ordering_client.services.backend_client import BackendClient, path_segment

logger = logging.getLogger(__name__)


class ProductServiceClient:
    """Catalog access for the menu and the staff product screens.

    Errors from the backend propagate as ``BackendError``; callers decide
    whether a failed read is fatal.
    """

    def __init__(self, backend: BackendClient) -> None:
        """Initialize the product client.

        Args:
            backend: Shared backend HTTP client
        """
        self.backend = backend

    @traced("products.list_products")
    async def list_products(self) -> list[Product]:
        data = await self.backend.get("product/all")
        return _parse_products(data)

    async def list_available_products(self, category: ProductCategory | str | None = None) -> list[Product]:
        """Products a customer can order, optionally for one category.

        Args:
            category: Category filter; None lists the whole menu

        Returns:
            Products whose ``available`` flag is not false
        """
        if category:
            products = await self.list_by_category(category)
        else:
            products = await self.list_products()
        return [product for product in products if product.available]

    @traced("products.get_product")
    async def get_product(self, product_id: int) -> Product:
        data = await self.backend.get(f"product/{product_id}")
        return Product.from_api_payload(data)

    @traced("products.get_by_code")
    async def get_by_code(self, code: str) -> Product:
        data = await self.backend.get(f"product/find-by-code/{path_segment(code)}")
        return Product.from_api_payload(data)

    @traced("products.search_by_name")
    async def search_by_name(self, name: str) -> list[Product]:
        data = await self.backend.get(f"product/find-by-name/{path_segment(name)}")
        return _parse_products(data)

    @traced("products.list_by_category")
    async def list_by_category(self, category: ProductCategory | str) -> list[Product]:
        """List products in a category.

        The backend only matches upper-case category names.

        Args:
            category: Category enum member or name in any case

        Returns:
            List of products, empty if the category has none
        """
        name = category.value if isinstance(category, ProductCategory) else category.upper()
        data = await self.backend.get(f"product/find-by-category/{path_segment(name)}")
        return _parse_products(data)

    @traced("products.create_product")
    async def create_product(self, draft: ProductDraft) -> Product:
        data = await self.backend.post("product/save", json=draft.to_api_payload())
        logger.info(f"Created product {draft.code}")
        return Product.from_api_payload(data)

    @traced("products.update_product")
    async def update_product(self, product_id: int, draft: ProductDraft) -> Product:
        data = await self.backend.put("product/update", json=draft.to_api_payload(product_id))
        return Product.from_api_payload(data)

    @traced("products.delete_product")
    async def delete_product(self, code: str) -> None:
        await self.backend.delete(f"product/delete/{path_segment(code)}")
        logger.info(f"Deleted product {code}")

    @traced("inventory.list_inventory")
    async def list_inventory(self) -> list[InventoryEntry]:
        data = await self.backend.get("inventory/all")
        return [InventoryEntry.from_api_payload(item) for item in data or []]

    @traced("ingredients.list_ingredients")
    async def list_ingredients(self) -> list[Ingredient]:
        data = await self.backend.get("ingredient/all")
        return [Ingredient.from_api_payload(item) for item in data or []]


def _parse_products(data: Any) -> list[Product]:
    return [Product.from_api_payload(item) for item in data or []]
