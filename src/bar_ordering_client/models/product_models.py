"""Product catalog models.

These mirror the product DTOs served by the ordering backend. Upstream field
names are camelCase; ``from_api_payload`` maps them onto the snake_case models
used everywhere else in this package.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProductCategory(str, Enum):
    """Product categories known to the bar menu."""

    BEER = "BEER"
    WINE = "WINE"
    COCKTAILS = "COCKTAILS"
    JUICES = "JUICES"


class ProductIngredient(BaseModel):
    """Ingredient line attached to a product recipe."""

    id: int = Field(..., description="Ingredient line identifier")
    ingredient_name: str = Field(..., description="Ingredient display name")
    quantity: float = Field(..., description="Amount used per product", ge=0)
    unit_of_measure: str = Field(..., description="Unit for the quantity")

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "ProductIngredient":
        return cls(
            id=data["id"],
            ingredient_name=data.get("ingredientName", ""),
            quantity=data.get("quantity", 0),
            unit_of_measure=data.get("unitOfMeasure", ""),
        )


class Product(BaseModel):
    """Product as listed on the menu.

    Summary listings only carry id, name, category and usually price; the
    detail endpoints add code, photo and ingredients. Both shapes load into
    this one model.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Unique identifier for the product")
    name: str = Field(..., description="Product name")
    code: str | None = Field(None, description="Short product code used by staff orders")
    description: str | None = Field(None, description="Product description")
    category: str = Field(default="", description="Category name, usually a ProductCategory")
    price: Decimal | None = Field(None, description="Unit price", ge=0)
    available: bool = Field(default=True, description="Whether the product can be ordered")
    photo_id: int | None = Field(None, description="Backend photo identifier")
    is_prepared: bool | None = Field(None, description="Whether the bar prepares it to order")
    ingredients: tuple[ProductIngredient, ...] = Field(default=(), description="Recipe lines")

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "Product":
        """Create a Product from a backend product DTO.

        Args:
            data: ProductDto or ProductDetailDto dictionary

        Returns:
            Product: Parsed model instance
        """
        price = data.get("price")
        available = data.get("available")

        return cls(
            id=data["id"],
            name=data["name"],
            code=data.get("code"),
            description=data.get("description"),
            category=str(data.get("category") or ""),
            price=Decimal(str(price)) if price is not None else None,
            available=available is not False,
            photo_id=data.get("photoId"),
            is_prepared=data.get("isPrepared"),
            ingredients=tuple(
                ProductIngredient.from_api_payload(item) for item in data.get("ingredients") or []
            ),
        )


class ProductDraft(BaseModel):
    """Payload for creating or updating a product."""

    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    is_prepared: bool = False
    category: ProductCategory

    def to_api_payload(self, product_id: int | None = None) -> dict[str, Any]:
        """Convert to the backend's CreateProductDto shape.

        Args:
            product_id: Included when the payload is used for an update

        Returns:
            dict: JSON-serializable request body
        """
        payload: dict[str, Any] = {
            "name": self.name,
            "code": self.code,
            "price": float(self.price),
            "isPrepared": self.is_prepared,
            "category": self.category.value,
        }

        if self.description is not None:
            payload["description"] = self.description

        if product_id is not None:
            payload["id"] = product_id

        return payload


class Ingredient(BaseModel):
    """Ingredient from the backend's ingredient listing."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str | None = None
    unit_of_measure: str | None = None

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "Ingredient":
        return cls.model_validate(
            {
                **data,
                "name": data.get("name") or data.get("ingredientName"),
                "unit_of_measure": data.get("unitOfMeasure"),
            }
        )


class InventoryEntry(BaseModel):
    """Stock line from the backend's inventory listing.

    The inventory DTO is not fixed upstream, so unknown fields are kept.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    quantity: float | None = None

    @classmethod
    def from_api_payload(cls, data: dict[str, Any]) -> "InventoryEntry":
        return cls.model_validate(data)
