from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.common import ApiResponse
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductWithVariantsRead,
    VariantCreate,
    VariantRead,
    VariantUpdate,
)
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo, CategoryRepository())


# -------- Public endpoints --------


@router.get("", response_model=ApiResponse[list[ProductWithVariantsRead]])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    only_active: bool = True,
    category_id: int | None = None,
):
    """
    List products with their variants.

    - Public endpoint.
    - `only_active=True` hides inactive products by default.
    - `category_id` narrows the list to one category.
    """
    products = service.list_products(
        session,
        skip=skip,
        limit=limit,
        only_active=only_active,
        category_id=category_id,
    )
    return {"success": True, "data": products}


@router.get("/{product_id}", response_model=ApiResponse[ProductWithVariantsRead])
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id, with variants and stock.
    """
    return {"success": True, "data": service.get_product_details(session, product_id)}


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ApiResponse[ProductWithVariantsRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).
    """
    return {"success": True, "data": service.create_product(session, payload)}


@router.patch(
    "/variants/{variant_id}",
    response_model=ApiResponse[VariantRead],
    dependencies=[Depends(require_admin)],
)
def update_variant(
    variant_id: int,
    payload: VariantUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a variant, e.g. restock (admin only).
    """
    variant = service.update_variant(session, variant_id, payload)
    return {"success": True, "data": VariantRead.model_validate(variant)}


@router.patch(
    "/{product_id}",
    response_model=ApiResponse[ProductWithVariantsRead],
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    return {"success": True, "data": service.update_product(session, product_id, payload)}


@router.delete(
    "/{product_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a product and its variants (admin only).
    """
    service.delete_product(session, product_id)
    return {"success": True, "message": "Product deleted successfully"}


@router.post(
    "/{product_id}/variants",
    response_model=ApiResponse[VariantRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def add_variant(
    product_id: int,
    payload: VariantCreate,
    session: Session = Depends(get_session),
):
    """
    Add a variant (color/size/material + stock) to a product (admin only).
    """
    variant = service.add_variant(session, product_id, payload)
    return {"success": True, "data": VariantRead.model_validate(variant)}
