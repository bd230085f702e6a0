from sqlalchemy import or_, update
from sqlmodel import Session, select

from app.models.address import Address
from app.models.order import Order


class AddressRepository:
    """
    Data access layer for addresses.

    NOTE:
      - No commits here; addresses are also written inside the order
        placement transaction. Services decide when to commit.
    """

    def list_for_user(self, session: Session, user_id: int) -> list[Address]:
        stmt = (
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.created_at.desc(), Address.id.desc())
        )
        return list(session.exec(stmt).all())

    def get_for_user(
        self,
        session: Session,
        user_id: int,
        address_id: int,
    ) -> Address | None:
        stmt = select(Address).where(
            Address.id == address_id,
            Address.user_id == user_id,
        )
        return session.exec(stmt).first()

    def find_exact(
        self,
        session: Session,
        user_id: int,
        *,
        street: str,
        city: str,
        state: str,
        country: str,
        postal_code: str,
    ) -> Address | None:
        """
        Exact match on all five postal fields (no trimming, no case folding).
        """
        stmt = (
            select(Address)
            .where(
                Address.user_id == user_id,
                Address.street == street,
                Address.city == city,
                Address.state == state,
                Address.country == country,
                Address.postal_code == postal_code,
            )
            .order_by(Address.id)
        )
        return session.exec(stmt).first()

    def add(self, session: Session, address: Address) -> Address:
        """Insert without committing, but ensure id is populated."""
        session.add(address)
        session.flush()
        session.refresh(address)
        return address

    def is_used_by_order(self, session: Session, address_id: int) -> bool:
        stmt = select(Order.id).where(
            or_(
                Order.shipping_address_id == address_id,
                Order.billing_address_id == address_id,
            )
        )
        return session.exec(stmt).first() is not None

    def delete(self, session: Session, address: Address) -> None:
        session.delete(address)
        session.flush()

    def clear_role_flag(self, session: Session, user_id: int, role: str) -> None:
        """Reset is_billing / is_shipping on every address of the user."""
        column = Address.is_billing if role == "billing" else Address.is_shipping
        stmt = (
            update(Address)
            .where(Address.user_id == user_id)
            .values({column: False})
        )
        session.execute(stmt)
