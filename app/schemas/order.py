from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ConfigDict, model_validator
from sqlmodel import SQLModel, Field

from app.schemas.address import AddressInput


class LineItemOutcome(str, Enum):
    """What happened to a line item during order placement."""

    INSERTED = "inserted"
    # Variant did not resolve: item recorded, stock untouched
    INSERTED_NO_STOCK_UPDATE = "inserted_no_stock_update"


class OrderItemCreate(SQLModel):
    """
    One requested line item.

    Storefront clients send either `variant_id` or `product_id`, and
    either `unit_price` or `price`; `variant_id` / `unit_price` win
    when both are present.
    """

    model_config = ConfigDict(extra="ignore")

    variant_id: int
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)

    @model_validator(mode="before")
    @classmethod
    def map_legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("variant_id") is None and data.get("product_id") is not None:
            data["variant_id"] = data["product_id"]
        if data.get("unit_price") is None and data.get("price") is not None:
            data["unit_price"] = data["price"]
        return data


class OrderCreate(SQLModel):
    """
    Payload for placing an order.

    Presence checks (items, addresses) happen in OrderService so they
    are reported as validation errors before any database write.
    `total` is stored as sent; discounts are applied client-side.
    `subtotal` and `payment_method` sent by the storefront are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    items: list[OrderItemCreate] = Field(default_factory=list)
    shipping_address: AddressInput | None = None
    billing_address: AddressInput | None = None
    shipping: float = Field(default=0.0, ge=0)
    tax: float = Field(default=0.0, ge=0)
    total: float = Field(ge=0)


class OrderAddressRead(SQLModel):
    street: str
    city: str
    state: str
    country: str
    postal_code: str


class OrderItemRead(SQLModel):
    """
    Line item joined with variant/product display fields.
    Display fields are None when the variant no longer resolves.
    """

    id: int
    order_id: int
    variant_id: int
    quantity: int
    unit_price: float
    line_total: float
    product_name: str | None = None
    sku: str | None = None
    color: str | None = None
    size: str | None = None
    material: str | None = None
    # Only set in the response of order placement
    outcome: LineItemOutcome | None = None


class OrderRead(SQLModel):
    """
    Order header with resolved shipping and billing addresses.
    """

    id: int
    user_id: int
    total_amount: float
    status: str
    tracking_number: str
    shipping_address: OrderAddressRead | None
    billing_address: OrderAddressRead | None
    created_at: datetime
    updated_at: datetime


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]
    subtotal: float


class OrderCustomerRead(SQLModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class AdminOrderRead(OrderWithItemsRead):
    """Admin listing adds the customer contact details."""

    customer: OrderCustomerRead


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    Validated against the status enumeration by the service.
    """

    model_config = ConfigDict(extra="forbid")

    status: str
