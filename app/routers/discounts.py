from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.discount_repo import DiscountTierRepository
from app.schemas.common import ApiResponse
from app.schemas.discount import DiscountTierCreate, DiscountTierRead, DiscountTierUpdate
from app.services.discount_service import DiscountTierService

router = APIRouter(prefix="/discount-tiers", tags=["Discount tiers"])

repo = DiscountTierRepository()
service = DiscountTierService(repo)


def _read(tiers) -> list[DiscountTierRead]:
    return [DiscountTierRead.model_validate(t) for t in tiers]


# -------- Public endpoints --------


@router.get("", response_model=ApiResponse[list[DiscountTierRead]])
def list_tiers(
    session: Session = Depends(get_session),
    tier_type: str | None = Query(default=None, alias="type"),
):
    """
    Active tiers, newest first, optionally of one `type`.
    """
    tiers = service.list_tiers(session, only_active=True, tier_type=tier_type)
    return {"success": True, "data": _read(tiers)}


@router.get("/active", response_model=ApiResponse[list[DiscountTierRead]])
def list_current_tiers(
    session: Session = Depends(get_session),
    tier_type: str | None = Query(default=None, alias="type"),
):
    """
    Tiers the storefront applies today: active, and today inside the
    start/end window.
    """
    tiers = service.list_current(session, tier_type=tier_type)
    return {"success": True, "data": _read(tiers)}


# -------- Admin endpoints --------


@router.get(
    "/all",
    response_model=ApiResponse[list[DiscountTierRead]],
    dependencies=[Depends(require_admin)],
)
def list_all_tiers(
    session: Session = Depends(get_session),
    tier_type: str | None = Query(default=None, alias="type"),
):
    """
    Every tier including inactive ones (admin only).
    """
    tiers = service.list_tiers(session, only_active=False, tier_type=tier_type)
    return {"success": True, "data": _read(tiers)}


@router.get("/{tier_id}", response_model=ApiResponse[DiscountTierRead])
def get_tier(
    tier_id: int,
    session: Session = Depends(get_session),
):
    tier = service.get_tier(session, tier_id)
    return {"success": True, "data": DiscountTierRead.model_validate(tier)}


@router.post(
    "",
    response_model=ApiResponse[DiscountTierRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_tier(
    payload: DiscountTierCreate,
    session: Session = Depends(get_session),
):
    tier = service.create_tier(session, payload)
    return {
        "success": True,
        "message": "Discount tier created successfully",
        "data": DiscountTierRead.model_validate(tier),
    }


@router.put(
    "/{tier_id}",
    response_model=ApiResponse[DiscountTierRead],
    dependencies=[Depends(require_admin)],
)
def update_tier(
    tier_id: int,
    payload: DiscountTierUpdate,
    session: Session = Depends(get_session),
):
    """
    Update the fields that are sent (admin only).
    """
    tier = service.update_tier(session, tier_id, payload)
    return {
        "success": True,
        "message": "Discount tier updated successfully",
        "data": DiscountTierRead.model_validate(tier),
    }


@router.delete(
    "/{tier_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
def delete_tier(
    tier_id: int,
    session: Session = Depends(get_session),
):
    service.delete_tier(session, tier_id)
    return {"success": True, "message": "Discount tier deleted successfully"}
