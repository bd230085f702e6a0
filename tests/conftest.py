"""Pytest fixtures for storefront tests."""

import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time by app.database / app.core.auth
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["IDP_JWT_KEY"] = "test-idp-secret"
os.environ["IDP_JWT_ALG"] = "HS256"
os.environ["JWT_SECRET"] = "test-local-secret"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.auth import create_access_token
from app.database import get_session
from app.main import app
from app.models.product import Product, ProductVariant
from app.models.user import User

IDP_SECRET = "test-idp-secret"


def make_idp_token(sub: str, email: str | None = None, **claims) -> str:
    """Sign a token the way the identity provider would."""
    payload = {
        "sub": sub,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, IDP_SECRET, algorithm="HS256")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    """Test client sharing the test session with the app."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def customer(session):
    """A user already synced from the identity provider."""
    user = User(
        email="ada@example.com",
        first_name="Ada",
        last_name="Lovelace",
        external_id="idp-ada",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer_headers(customer):
    return bearer(make_idp_token(customer.external_id, customer.email))


@pytest.fixture
def admin(session):
    user = User(email="admin@example.com", role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin_headers(admin):
    return bearer(create_access_token(admin))


@pytest.fixture
def variant(session):
    """A mug variant with 10 units in stock."""
    product = Product(name="Ceramic Mug", slug="ceramic-mug", base_price=10.0)
    session.add(product)
    session.commit()
    session.refresh(product)

    variant = ProductVariant(
        product_id=product.id,
        sku="MUG-RED-L",
        color="red",
        size="L",
        stock_quantity=10,
    )
    session.add(variant)
    session.commit()
    session.refresh(variant)
    return variant


@pytest.fixture
def address_payload():
    return {
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "country": "US",
        "postal_code": "62701",
    }


@pytest.fixture
def idp_headers():
    """Build Authorization headers for an identity-provider subject."""

    def _headers(sub: str, email: str | None = None, **claims) -> dict[str, str]:
        return bearer(make_idp_token(sub, email, **claims))

    return _headers


@pytest.fixture
def local_headers():
    """Build Authorization headers carrying a locally issued token."""

    def _headers(user: User) -> dict[str, str]:
        return bearer(create_access_token(user))

    return _headers
