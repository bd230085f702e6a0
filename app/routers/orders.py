from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import get_current_customer, require_admin
from app.core.config import get_settings
from app.database import get_session
from app.models.user import User
from app.repositories.address_repo import AddressRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.common import ApiResponse
from app.schemas.order import (
    OrderCreate,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from app.services.address_service import AddressService
from app.services.order_service import OrderService
from app.services.tracking import TrackingNumberGenerator

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
product_repo = ProductRepository()
service = OrderService(
    order_repo,
    product_repo,
    AddressService(AddressRepository()),
    TrackingNumberGenerator(
        order_repo,
        max_attempts=settings.TRACKING_NUMBER_MAX_ATTEMPTS,
    ),
    enforce_non_negative_stock=settings.ENFORCE_NON_NEGATIVE_STOCK,
)


# -------- Customer endpoints --------


@router.get("", response_model=ApiResponse[list[OrderWithItemsRead]])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated customer's orders, newest first, with items.
    """
    orders = service.list_user_orders(session, current_user.id, skip, limit)
    return {"success": True, "data": orders}


@router.post(
    "",
    response_model=ApiResponse[OrderWithItemsRead],
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    """
    Place an order.

    Body:
      - items: [{variant_id | product_id, quantity, unit_price | price}]
      - shipping_address, billing_address: street, city, state,
        country, postal_code
      - total, stored as sent (discounts are applied client-side)

    Errors:
      - 400 empty items / missing addresses
      - 404 identity not synced to a local user
      - 409 tracking numbers exhausted, or insufficient stock when the
        non-negative stock floor is enabled
      - 500 transactional failure (everything rolled back)
    """
    order = service.create_order(session, current_user.id, payload)
    return {
        "success": True,
        "message": "Order created successfully",
        "data": order,
    }


@router.get("/{order_id}", response_model=ApiResponse[OrderWithItemsRead])
def get_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    """
    Get a single order (with items) belonging to the current customer.
    """
    order = service.get_user_order(session, current_user.id, order_id)
    return {"success": True, "data": order}


@router.patch("/{order_id}/cancel", response_model=ApiResponse[OrderWithItemsRead])
def cancel_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    """
    Cancel one of the customer's orders.

    Only pending and processing orders can be cancelled.
    """
    order = service.cancel_user_order(session, current_user.id, order_id)
    return {
        "success": True,
        "message": "Order cancelled successfully",
        "data": order,
    }


# -------- Admin endpoints --------


@router.put(
    "/{order_id}/status",
    response_model=ApiResponse[OrderWithItemsRead],
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status (admin only).

    Allowed values: pending, processing, shipped, delivered, cancelled.
    The current status does not restrict the change.
    """
    order = service.update_status(session, order_id, payload)
    return {
        "success": True,
        "message": f"Order status updated to {order.status}",
        "data": order,
    }
