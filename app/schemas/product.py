from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - slug is optional: if omitted, generated from `name`.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    slug: str | None = None
    description: str | None = None
    base_price: float = Field(ge=0)
    image_url: str | None = None
    category_id: int | None = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("slug cannot be empty if provided")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    slug: str | None = None
    description: str | None = None
    base_price: float | None = Field(default=None, ge=0)
    image_url: str | None = None
    category_id: int | None = None
    is_active: bool | None = None

    @field_validator("name", "slug")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class VariantCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    sku: str = Field(max_length=100)
    color: str | None = None
    size: str | None = None
    material: str | None = None
    price_modifier: float = 0.0
    stock_quantity: int = Field(default=0, ge=0)

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("sku cannot be empty")
        return v


class VariantUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    color: str | None = None
    size: str | None = None
    material: str | None = None
    price_modifier: float | None = None
    stock_quantity: int | None = Field(default=None, ge=0)


class VariantRead(SQLModel):
    id: int
    product_id: int
    sku: str
    color: str | None
    size: str | None
    material: str | None
    price_modifier: float
    stock_quantity: int


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: int
    name: str
    slug: str
    description: str | None
    base_price: float
    image_url: str | None
    category_id: int | None
    is_active: bool
    created_at: datetime


class ProductWithVariantsRead(ProductRead):
    variants: list[VariantRead]
