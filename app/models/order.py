from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order.

    Created atomically together with its line items; afterwards only
    `status` (and `updated_at`) change.
    """

    __tablename__ = "orders"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    # Declared by the client
    total_amount: float = Field(
        description="Final amount for this order",
    )

    # pending | processing | shipped | delivered | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    shipping_address_id: int = Field(foreign_key="addresses.id")
    billing_address_id: int = Field(foreign_key="addresses.id")

    tracking_number: str = Field(
        max_length=32,
        unique=True,
        index=True,
        description="Human-readable order reference (TRK...)",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    variant_id is a plain reference: the item is recorded even when the
    variant does not resolve. unit_price is a snapshot taken at order
    time and never follows later price changes.
    """

    __tablename__ = "order_items"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    order_id: int = Field(
        foreign_key="orders.id",
        index=True,
    )

    variant_id: int = Field(index=True)

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="Unit price at time of order",
    )
