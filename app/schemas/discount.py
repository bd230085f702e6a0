from datetime import date, datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

APPLY_TYPES = ("AUTO", "CODE")


def _check_apply_type(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip().upper()
    if v not in APPLY_TYPES:
        raise ValueError(f"apply_type must be one of: {', '.join(APPLY_TYPES)}")
    return v


class DiscountTierCreate(SQLModel):
    """
    Payload for a new tier.

    Cross-field rules (quantity range, date window, code required for
    CODE tiers) are checked by DiscountTierService so updates get the
    same checks on the merged row.
    """

    model_config = ConfigDict(extra="forbid")

    apply_type: str = "AUTO"
    discount_code: str | None = Field(default=None, max_length=50)
    type: str = Field(default="amount_off_products", max_length=50)
    min_quantity: int | None = Field(default=None, ge=1)
    max_quantity: int | None = Field(default=None, ge=1)
    percentage_discount: float | None = Field(default=None, ge=0, le=100)
    fixed_discount: float | None = Field(default=None, ge=0)
    price_per_unit: float | None = Field(default=None, ge=0)
    free_shipping: bool = False
    label: str = Field(default="", max_length=255)
    description: str = ""
    is_active: bool = True
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("apply_type")
    @classmethod
    def validate_apply_type(cls, v: str | None) -> str | None:
        return _check_apply_type(v)

    @field_validator("discount_code")
    @classmethod
    def normalize_code(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class DiscountTierUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    apply_type: str | None = None
    discount_code: str | None = Field(default=None, max_length=50)
    type: str | None = Field(default=None, max_length=50)
    min_quantity: int | None = Field(default=None, ge=1)
    max_quantity: int | None = Field(default=None, ge=1)
    percentage_discount: float | None = Field(default=None, ge=0, le=100)
    fixed_discount: float | None = Field(default=None, ge=0)
    price_per_unit: float | None = Field(default=None, ge=0)
    free_shipping: bool | None = None
    label: str | None = Field(default=None, max_length=255)
    description: str | None = None
    is_active: bool | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("apply_type")
    @classmethod
    def validate_apply_type(cls, v: str | None) -> str | None:
        return _check_apply_type(v)


class DiscountTierRead(SQLModel):
    id: int
    apply_type: str
    discount_code: str | None
    type: str
    min_quantity: int | None
    max_quantity: int | None
    percentage_discount: float | None
    fixed_discount: float | None
    price_per_unit: float | None
    free_shipping: bool
    label: str
    description: str
    is_active: bool
    start_date: date | None
    end_date: date | None
    created_at: datetime
    updated_at: datetime
