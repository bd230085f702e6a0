from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - external_id: subject ("sub") of the external identity provider.
        Filled on first sync, or backfilled when an existing local
        account with the same email signs in through the provider.
      - password_hash: only set for local email/password accounts.

    Role:
      - "user" | "admin"
    """

    __tablename__ = "users"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        max_length=255,
    )

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=50)

    # Application role (admin must be manually promoted)
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    external_id: str | None = Field(
        default=None,
        unique=True,
        index=True,
        description="Identity provider user id",
    )

    password_hash: str | None = Field(
        default=None,
        description="bcrypt hash for local accounts",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
