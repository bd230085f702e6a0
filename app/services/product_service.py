import re
import unicodedata

from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError
from app.models.product import Product, ProductVariant
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductWithVariantsRead,
    VariantCreate,
    VariantRead,
    VariantUpdate,
)

SLUG_MAX_LENGTH = 200


def slugify(raw: str) -> str:
    """
    "Crème Brûlée Mug (L)" -> "creme-brulee-mug-l"

    Accents are folded to ASCII, anything else non-alphanumeric becomes
    a single hyphen.
    """
    ascii_text = (
        unicodedata.normalize("NFKD", raw).encode("ascii", "ignore").decode("ascii")
    )
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].rstrip("-") or "product"


class ProductService:
    """
    Catalog management.

    Products carry a unique slug; purchasable stock lives on variants,
    each with a unique SKU. Write operations are admin-only (enforced by
    the router).
    """

    def __init__(self, repo: ProductRepository, category_repo: CategoryRepository):
        self.repo = repo
        self.category_repo = category_repo

    def _check_category(self, session: Session, category_id: int | None) -> None:
        if category_id is None:
            return
        if self.category_repo.get_by_id(session, category_id) is None:
            raise NotFoundError("Category not found")

    def _free_slug(self, session: Session, wanted: str, product_id: int | None = None) -> str:
        """First of wanted, wanted-2, wanted-3, ... not taken by another product."""
        candidate, n = wanted, 1
        while True:
            owner = self.repo.get_by_slug(session, candidate)
            if owner is None or owner.id == product_id:
                return candidate
            n += 1
            candidate = f"{wanted}-{n}"

    def _with_variants(self, session: Session, product: Product) -> ProductWithVariantsRead:
        variants = self.repo.list_variants(session, product.id)
        return ProductWithVariantsRead(
            **product.model_dump(),
            variants=[VariantRead.model_validate(v) for v in variants],
        )

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
        category_id: int | None = None,
    ) -> list[ProductWithVariantsRead]:
        products = self.repo.list_products(
            session,
            skip=skip,
            limit=limit,
            only_active=only_active,
            category_id=category_id,
        )
        return [self._with_variants(session, p) for p in products]

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    def get_product_details(self, session: Session, product_id: int) -> ProductWithVariantsRead:
        return self._with_variants(session, self.get_product(session, product_id))

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
    ) -> ProductWithVariantsRead:
        """The slug comes from `payload.slug` when given, else from the name."""
        self._check_category(session, payload.category_id)
        data = payload.model_dump()
        data["slug"] = self._free_slug(session, slugify(payload.slug or payload.name))
        product = self.repo.create(session, Product(**data))
        return self._with_variants(session, product)

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductUpdate,
    ) -> ProductWithVariantsRead:
        product = self.get_product(session, product_id)
        changes = payload.model_dump(exclude_none=True)
        self._check_category(session, changes.get("category_id"))

        if "slug" in changes:
            changes["slug"] = self._free_slug(
                session, slugify(changes["slug"]), product_id=product.id
            )

        for field, value in changes.items():
            setattr(product, field, value)
        return self._with_variants(session, self.repo.update(session, product))

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product and its variants. Past order items keep their
        variant_id and price snapshot.
        """
        product = self.get_product(session, product_id)
        self.repo.delete(session, product)

    # ----- Variants -----

    def add_variant(
        self,
        session: Session,
        product_id: int,
        payload: VariantCreate,
    ) -> ProductVariant:
        self.get_product(session, product_id)
        if self.repo.get_variant_by_sku(session, payload.sku) is not None:
            raise ConflictError(f"SKU already exists: {payload.sku}")

        variant = ProductVariant(product_id=product_id, **payload.model_dump())
        return self.repo.save_variant(session, variant)

    def update_variant(
        self,
        session: Session,
        variant_id: int,
        payload: VariantUpdate,
    ) -> ProductVariant:
        variant = self.repo.get_variant(session, variant_id)
        if not variant:
            raise NotFoundError("Variant not found")

        for field, value in payload.model_dump(exclude_none=True).items():
            setattr(variant, field, value)
        return self.repo.save_variant(session, variant)
