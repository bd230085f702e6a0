from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from app.schemas.common import ApiResponse
from app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])

repo = CategoryRepository()
service = CategoryService(repo)


# -------- Public endpoints --------


@router.get("", response_model=ApiResponse[list[CategoryRead]])
def list_categories(
    session: Session = Depends(get_session),
    only_active: bool = True,
):
    """
    List categories by name. Inactive ones are hidden unless
    `only_active=false`.
    """
    categories = service.list_categories(session, only_active=only_active)
    return {
        "success": True,
        "data": [CategoryRead.model_validate(c) for c in categories],
    }


@router.get("/{category_id}", response_model=ApiResponse[CategoryRead])
def get_category(
    category_id: int,
    session: Session = Depends(get_session),
):
    category = service.get_category(session, category_id)
    return {"success": True, "data": CategoryRead.model_validate(category)}


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ApiResponse[CategoryRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
):
    """
    Create a category (admin only).
    """
    category = service.create_category(session, payload)
    return {
        "success": True,
        "message": "Category created successfully",
        "data": CategoryRead.model_validate(category),
    }


@router.patch(
    "/{category_id}",
    response_model=ApiResponse[CategoryRead],
    dependencies=[Depends(require_admin)],
)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
):
    category = service.update_category(session, category_id, payload)
    return {"success": True, "data": CategoryRead.model_validate(category)}


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a category no product refers to (admin only).
    """
    service.delete_category(session, category_id)
    return {"success": True, "message": "Category deleted successfully"}
