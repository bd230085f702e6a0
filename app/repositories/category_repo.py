from sqlmodel import Session, select

from app.models.category import Category
from app.models.product import Product


class CategoryRepository:
    def get_by_id(self, session: Session, category_id: int) -> Category | None:
        return session.get(Category, category_id)

    def get_by_name(self, session: Session, name: str) -> Category | None:
        return session.exec(select(Category).where(Category.name == name)).first()

    def list_categories(
        self,
        session: Session,
        only_active: bool = True,
    ) -> list[Category]:
        stmt = select(Category)
        if only_active:
            stmt = stmt.where(Category.is_active == True)  # noqa: E712
        return list(session.exec(stmt.order_by(Category.name)).all())

    def has_products(self, session: Session, category_id: int) -> bool:
        stmt = select(Product.id).where(Product.category_id == category_id).limit(1)
        return session.exec(stmt).first() is not None

    def save(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete(self, session: Session, category: Category) -> None:
        session.delete(category)
        session.commit()
