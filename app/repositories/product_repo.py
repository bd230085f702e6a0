from sqlalchemy import update
from sqlmodel import Session, select

from app.models.product import Product, ProductVariant


class ProductRepository:
    """
    Data access layer for Product & ProductVariant.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Stock helpers never commit: they run inside the caller's
      order transaction.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def get_by_slug(self, session: Session, slug: str) -> Product | None:
        stmt = select(Product).where(Product.slug == slug)
        return session.exec(stmt).first()

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
        category_id: int | None = None,
    ) -> list[Product]:
        stmt = select(Product)
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        stmt = stmt.order_by(Product.id).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        for variant in self.list_variants(session, product.id):
            session.delete(variant)
        session.delete(product)
        session.commit()

    # ----- Variants -----

    def list_variants(self, session: Session, product_id: int) -> list[ProductVariant]:
        stmt = (
            select(ProductVariant)
            .where(ProductVariant.product_id == product_id)
            .order_by(ProductVariant.id)
        )
        return list(session.exec(stmt).all())

    def get_variant(self, session: Session, variant_id: int) -> ProductVariant | None:
        return session.get(ProductVariant, variant_id)

    def get_variant_by_sku(self, session: Session, sku: str) -> ProductVariant | None:
        stmt = select(ProductVariant).where(ProductVariant.sku == sku)
        return session.exec(stmt).first()

    def save_variant(self, session: Session, variant: ProductVariant) -> ProductVariant:
        session.add(variant)
        session.commit()
        session.refresh(variant)
        return variant

    def lock_variant(self, session: Session, variant_id: int) -> ProductVariant | None:
        """
        Read a variant row with SELECT ... FOR UPDATE so concurrent
        orders on the same variant serialize until commit/rollback.
        """
        stmt = (
            select(ProductVariant)
            .where(ProductVariant.id == variant_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return session.exec(stmt).first()

    def decrement_stock(self, session: Session, variant_id: int, quantity: int) -> None:
        """
        stock_quantity = stock_quantity - quantity, evaluated by the
        database so no read-modify-write happens in Python.
        """
        stmt = (
            update(ProductVariant)
            .where(ProductVariant.id == variant_id)
            .values(stock_quantity=ProductVariant.stock_quantity - quantity)
        )
        session.execute(stmt)
