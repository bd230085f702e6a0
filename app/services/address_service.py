import logging
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.address import Address
from app.repositories.address_repo import AddressRepository
from app.schemas.address import (
    AddressCreate,
    AddressInput,
    AddressRole,
    AddressUpdate,
)

logger = logging.getLogger(__name__)

ADDRESS_ROLES: tuple[str, ...] = ("billing", "shipping")


class AddressService:
    """
    Business logic for user addresses.

    Responsibilities:
      - profile address CRUD (commits)
      - default billing/shipping selection
      - dedup-or-create during order placement (never commits)
    """

    def __init__(self, repo: AddressRepository):
        self.repo = repo

    # ----- Order placement -----

    def find_or_create(
        self,
        session: Session,
        user_id: int,
        address: AddressInput,
        role: AddressRole,
    ) -> int:
        """
        Return the id of an identical address owned by the user, or
        insert a new one flagged for `role` and return its id.

        Equality is exact on street, city, state, country and postal
        code; whitespace and case differences create a new row.
        Runs on the caller's transaction.
        """
        existing = self.repo.find_exact(
            session,
            user_id,
            street=address.street,
            city=address.city,
            state=address.state,
            country=address.country,
            postal_code=address.postal_code,
        )
        if existing is not None:
            return existing.id

        created = self.repo.add(
            session,
            Address(
                user_id=user_id,
                street=address.street,
                city=address.city,
                state=address.state,
                country=address.country,
                postal_code=address.postal_code,
                is_billing=role == "billing",
                is_shipping=role == "shipping",
            ),
        )
        logger.info(f"Created {role} address {created.id} for user {user_id}")
        return created.id

    # ----- Profile CRUD -----

    def list_addresses(self, session: Session, user_id: int) -> list[Address]:
        return self.repo.list_for_user(session, user_id)

    def get_address(self, session: Session, user_id: int, address_id: int) -> Address:
        address = self.repo.get_for_user(session, user_id, address_id)
        if address is None:
            raise NotFoundError("Address not found or access denied")
        return address

    def create_address(
        self,
        session: Session,
        user_id: int,
        payload: AddressCreate,
    ) -> Address:
        address = self.repo.add(
            session,
            Address(user_id=user_id, **payload.model_dump()),
        )
        session.commit()
        session.refresh(address)
        return address

    def update_address(
        self,
        session: Session,
        user_id: int,
        address_id: int,
        payload: AddressUpdate,
    ) -> Address:
        """
        Partial update; fields left out (or blank) keep their value.
        """
        address = self.get_address(session, user_id, address_id)

        for field, value in payload.model_dump(exclude_none=True).items():
            setattr(address, field, value)
        address.updated_at = datetime.now(timezone.utc)

        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    def delete_address(self, session: Session, user_id: int, address_id: int) -> None:
        """
        Delete an address. Addresses referenced by orders are kept.
        """
        address = self.get_address(session, user_id, address_id)
        if self.repo.is_used_by_order(session, address.id):
            raise ConflictError("Address is referenced by an order and cannot be deleted")
        self.repo.delete(session, address)
        session.commit()

    def set_default(
        self,
        session: Session,
        user_id: int,
        address_id: int,
        role: str,
    ) -> Address:
        """
        Make `address_id` the only address flagged for `role`.

        Clears the flag on all of the user's addresses, then sets it on
        the chosen one, in a single commit.
        """
        if role not in ADDRESS_ROLES:
            raise ValidationError("Type must be 'billing' or 'shipping'")

        address = self.get_address(session, user_id, address_id)

        self.repo.clear_role_flag(session, user_id, role)
        if role == "billing":
            address.is_billing = True
        else:
            address.is_shipping = True
        address.updated_at = datetime.now(timezone.utc)

        session.add(address)
        session.commit()
        session.refresh(address)
        return address
