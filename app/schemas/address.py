from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

AddressRole = Literal["billing", "shipping"]


class AddressInput(SQLModel):
    """
    Structured address submitted with an order.

    Values are kept byte-for-byte: order placement dedups on exact
    equality, so "Main St" and "Main St " are different addresses.
    """

    street: str = Field(max_length=255)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    country: str = Field(max_length=100)
    postal_code: str = Field(max_length=20)

    @field_validator("street", "city", "state", "country", "postal_code")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field cannot be empty")
        return v


class AddressCreate(SQLModel):
    """
    Payload for adding an address from the profile page.
    Fields are trimmed.
    """

    model_config = ConfigDict(extra="forbid")

    street: str = Field(max_length=255)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    country: str = Field(max_length=100)
    postal_code: str = Field(max_length=20)
    is_billing: bool = False
    is_shipping: bool = False

    @field_validator("street", "city", "state", "country", "postal_code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("All address fields are required")
        return v


class AddressUpdate(SQLModel):
    """
    Partial address update. Blank strings keep the stored value.
    """

    model_config = ConfigDict(extra="forbid")

    street: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    is_billing: bool | None = None
    is_shipping: bool | None = None

    @field_validator("street", "city", "state", "country", "postal_code")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class DefaultAddressUpdate(SQLModel):
    # Checked by the service so the error lists the allowed values
    type: str = "shipping"


class AddressRead(SQLModel):
    id: int
    user_id: int
    street: str
    city: str
    state: str
    country: str
    postal_code: str
    is_billing: bool
    is_shipping: bool
    created_at: datetime
