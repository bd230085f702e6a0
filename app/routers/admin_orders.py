from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.routers.orders import service
from app.schemas.common import ApiResponse
from app.schemas.order import AdminOrderRead, OrderWithItemsRead

router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin Orders"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=ApiResponse[list[AdminOrderRead]])
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders with items and customer details (admin only).
    """
    return {"success": True, "data": service.list_all_orders(session, skip, limit)}


@router.get("/{order_id}", response_model=ApiResponse[AdminOrderRead])
def get_order_admin(
    order_id: int,
    session: Session = Depends(get_session),
):
    """
    Get any order with items (admin only).
    """
    return {"success": True, "data": service.get_order_admin(session, order_id)}


@router.patch("/{order_id}/cancel", response_model=ApiResponse[OrderWithItemsRead])
def cancel_order_admin(
    order_id: int,
    session: Session = Depends(get_session),
):
    """
    Cancel any order regardless of its current status (admin only).
    """
    order = service.cancel_order_admin(session, order_id)
    return {
        "success": True,
        "message": "Order cancelled successfully",
        "data": order,
    }
