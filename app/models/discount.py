from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class DiscountTier(SQLModel, table=True):
    """
    Quantity-based discount shown by the storefront.

    The storefront prices the basket with these tiers before placing
    the order; order placement stores the discounted total as sent.

    A tier is either applied automatically (apply_type="AUTO") or
    unlocked by `discount_code` (apply_type="CODE"). It is current
    while active and today falls inside [start_date, end_date]; open
    bounds are unbounded.
    """

    __tablename__ = "discount_tiers"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    apply_type: str = Field(default="AUTO", max_length=10)

    discount_code: str | None = Field(
        default=None,
        max_length=50,
        unique=True,
        index=True,
    )

    type: str = Field(
        default="amount_off_products",
        max_length=50,
        index=True,
    )

    min_quantity: int | None = Field(default=None, ge=1)
    max_quantity: int | None = Field(default=None, ge=1)

    percentage_discount: float | None = Field(default=None, ge=0, le=100)
    fixed_discount: float | None = Field(default=None, ge=0)
    price_per_unit: float | None = Field(default=None, ge=0)

    free_shipping: bool = Field(default=False)

    label: str = Field(default="", max_length=255)
    description: str = Field(default="")

    is_active: bool = Field(default=True, index=True)

    start_date: date | None = Field(default=None)
    end_date: date | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
