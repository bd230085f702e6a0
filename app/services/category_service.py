import logging
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.category import Category
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


class CategoryService:
    """
    Category management. Names are unique; a category still used by a
    product cannot be deleted.
    """

    def __init__(self, repo: CategoryRepository):
        self.repo = repo

    def _check_name_free(
        self,
        session: Session,
        name: str,
        category_id: int | None = None,
    ) -> None:
        owner = self.repo.get_by_name(session, name)
        if owner is not None and owner.id != category_id:
            raise ConflictError(f"Category already exists: {name}")

    def list_categories(self, session: Session, only_active: bool = True) -> list[Category]:
        return self.repo.list_categories(session, only_active=only_active)

    def get_category(self, session: Session, category_id: int) -> Category:
        category = self.repo.get_by_id(session, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def create_category(self, session: Session, payload: CategoryCreate) -> Category:
        self._check_name_free(session, payload.name)
        category = self.repo.save(session, Category(**payload.model_dump()))
        logger.info(f"Category {category.id} created: {category.name}")
        return category

    def update_category(
        self,
        session: Session,
        category_id: int,
        payload: CategoryUpdate,
    ) -> Category:
        changes = payload.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError(
                "At least one field (name, description, or is_active) is required"
            )

        category = self.get_category(session, category_id)
        if "name" in changes:
            self._check_name_free(session, changes["name"], category_id=category.id)

        for field, value in changes.items():
            setattr(category, field, value)
        category.updated_at = datetime.now(timezone.utc)
        return self.repo.save(session, category)

    def delete_category(self, session: Session, category_id: int) -> None:
        category = self.get_category(session, category_id)
        if self.repo.has_products(session, category.id):
            raise ConflictError("Category is still used by products")
        self.repo.delete(session, category)
