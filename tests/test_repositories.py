"""Tests for the catalog and user repositories."""

import typing

import pytest

from app.models.product import Product, ProductVariant
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository


class TestAnnotations:
    @pytest.mark.parametrize("repository", [ProductRepository, UserRepository])
    def test_builtins_are_not_shadowed(self, repository):
        assert "list" not in vars(repository)

    def test_variant_listing_hints_resolve(self):
        hints = typing.get_type_hints(ProductRepository.list_variants)

        assert hints["return"] == list[ProductVariant]


class TestProductRepository:
    def test_list_products_skips_inactive(self, session, variant):
        hidden = Product(name="Old Mug", slug="old-mug", base_price=5.0, is_active=False)
        session.add(hidden)
        session.commit()
        repo = ProductRepository()

        active = repo.list_products(session)
        everything = repo.list_products(session, only_active=False)

        assert [p.slug for p in active] == ["ceramic-mug"]
        assert [p.slug for p in everything] == ["ceramic-mug", "old-mug"]

    def test_list_variants(self, session, variant):
        variants = ProductRepository().list_variants(session, variant.product_id)

        assert [v.sku for v in variants] == ["MUG-RED-L"]


class TestUserRepository:
    def test_list_users_by_role(self, session, customer, admin):
        repo = UserRepository()

        assert [u.email for u in repo.list_users(session)] == [
            "ada@example.com",
            "admin@example.com",
        ]
        assert [u.email for u in repo.list_users(session, role="admin")] == [
            "admin@example.com"
        ]

    def test_list_users_paging(self, session, customer, admin):
        users = UserRepository().list_users(session, skip=1, limit=1)

        assert [u.email for u in users] == ["admin@example.com"]
        assert isinstance(users[0], User)
