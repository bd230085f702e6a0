from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import get_current_customer
from app.database import get_session
from app.models.user import User
from app.repositories.address_repo import AddressRepository
from app.schemas.address import (
    AddressCreate,
    AddressRead,
    AddressUpdate,
    DefaultAddressUpdate,
)
from app.schemas.common import ApiResponse
from app.services.address_service import AddressService

router = APIRouter(prefix="/addresses", tags=["Addresses"])

repo = AddressRepository()
service = AddressService(repo)


@router.get("", response_model=ApiResponse[list[AddressRead]])
def list_addresses(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    """List the customer's addresses, newest first."""
    addresses = service.list_addresses(session, current_user.id)
    return {
        "success": True,
        "data": [AddressRead.model_validate(a) for a in addresses],
    }


@router.get("/{address_id}", response_model=ApiResponse[AddressRead])
def get_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    address = service.get_address(session, current_user.id, address_id)
    return {"success": True, "data": AddressRead.model_validate(address)}


@router.post(
    "",
    response_model=ApiResponse[AddressRead],
    status_code=status.HTTP_201_CREATED,
)
def create_address(
    payload: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    address = service.create_address(session, current_user.id, payload)
    return {
        "success": True,
        "message": "Address created successfully",
        "data": AddressRead.model_validate(address),
    }


@router.put("/{address_id}", response_model=ApiResponse[AddressRead])
def update_address(
    address_id: int,
    payload: AddressUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    """
    Update an address; omitted or blank fields keep their value.
    """
    address = service.update_address(session, current_user.id, address_id, payload)
    return {
        "success": True,
        "message": "Address updated successfully",
        "data": AddressRead.model_validate(address),
    }


@router.delete("/{address_id}", response_model=ApiResponse[None])
def delete_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    service.delete_address(session, current_user.id, address_id)
    return {"success": True, "message": "Address deleted successfully"}


@router.patch("/{address_id}/default", response_model=ApiResponse[AddressRead])
def set_default_address(
    address_id: int,
    payload: DefaultAddressUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    """
    Make this the default billing or shipping address.

    Body: {"type": "billing" | "shipping"} (defaults to shipping).
    """
    address = service.set_default(session, current_user.id, address_id, payload.type)
    return {
        "success": True,
        "message": f"Default {payload.type} address set successfully",
        "data": AddressRead.model_validate(address),
    }
