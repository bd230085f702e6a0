from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

Role = Literal["user", "admin"]


class UserRead(SQLModel):
    """Response schema returned to clients (never includes password_hash)."""

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    role: Role
    created_at: datetime


class ProfileUpdate(SQLModel):
    """
    Profile edit for identity-provider users.

    first_name and last_name are required and trimmed;
    an empty phone clears the stored value.
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    phone: str | None = Field(default=None, max_length=50)

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("First name and last name are required")
        return v

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class SignupRequest(SQLModel):
    """Local email/password account creation."""

    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class LoginRequest(SQLModel):
    email: EmailStr
    password: str


class AuthSession(SQLModel):
    """Login result: profile plus the signed access token."""

    user: UserRead
    token: str


class TokenVerification(SQLModel):
    valid: bool
    user: UserRead | None = None


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class ExternalIdentity(SQLModel):
    """
    Identity asserted by a verified identity-provider token.
    `email` may be missing from the token claims.
    """

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
