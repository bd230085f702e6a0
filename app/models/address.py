from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Address(SQLModel, table=True):
    """
    Postal address owned by exactly one user.

    is_billing / is_shipping mark default-use roles. They are independent,
    and several addresses may carry the same flag; only the "set default"
    operation clears the flag on the user's other addresses first.
    """

    __tablename__ = "addresses"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    street: str = Field(max_length=255)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    country: str = Field(max_length=100)
    postal_code: str = Field(max_length=20)

    is_billing: bool = Field(default=False)
    is_shipping: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
