from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Storefront category. Products point at it through `category_id`.
    """

    __tablename__ = "categories"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        max_length=100,
        unique=True,
        index=True,
    )

    description: str | None = Field(default=None, max_length=500)

    is_active: bool = Field(
        default=True,
        description="Inactive categories are hidden from the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
