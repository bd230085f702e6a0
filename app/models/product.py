from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Purchasable configurations (color/size/material) and their stock
    live on ProductVariant.
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description / HTML",
    )

    base_price: float = Field(
        ge=0,
        description="Unit price before variant modifiers",
    )

    image_url: str | None = Field(default=None)

    category_id: int | None = Field(
        default=None,
        foreign_key="categories.id",
        index=True,
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class ProductVariant(SQLModel, table=True):
    """
    Purchasable configuration of a product with its own stock counter.

    stock_quantity is decremented by order placement. It may go below
    zero unless ENFORCE_NON_NEGATIVE_STOCK is enabled.
    """

    __tablename__ = "product_variants"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        index=True,
    )

    sku: str = Field(
        max_length=100,
        unique=True,
        index=True,
    )

    color: str | None = Field(default=None, max_length=50)
    size: str | None = Field(default=None, max_length=50)
    material: str | None = Field(default=None, max_length=100)

    price_modifier: float = Field(
        default=0.0,
        description="Added to the product base price",
    )

    stock_quantity: int = Field(
        default=0,
        description="Units currently in stock",
    )
