from datetime import date

from sqlalchemy import or_
from sqlmodel import Session, select

from app.models.discount import DiscountTier


class DiscountTierRepository:
    """
    Queries over discount_tiers, newest first.
    """

    def get_by_id(self, session: Session, tier_id: int) -> DiscountTier | None:
        return session.get(DiscountTier, tier_id)

    def get_by_code(self, session: Session, code: str) -> DiscountTier | None:
        stmt = select(DiscountTier).where(DiscountTier.discount_code == code)
        return session.exec(stmt).first()

    def list_tiers(
        self,
        session: Session,
        only_active: bool = True,
        tier_type: str | None = None,
    ) -> list[DiscountTier]:
        stmt = select(DiscountTier)
        if only_active:
            stmt = stmt.where(DiscountTier.is_active == True)  # noqa: E712
        if tier_type is not None:
            stmt = stmt.where(DiscountTier.type == tier_type)
        stmt = stmt.order_by(DiscountTier.created_at.desc(), DiscountTier.id.desc())
        return list(session.exec(stmt).all())

    def list_current(
        self,
        session: Session,
        today: date,
        tier_type: str | None = None,
    ) -> list[DiscountTier]:
        """Active tiers whose date window contains `today`."""
        stmt = select(DiscountTier).where(
            DiscountTier.is_active == True,  # noqa: E712
            or_(DiscountTier.start_date.is_(None), DiscountTier.start_date <= today),
            or_(DiscountTier.end_date.is_(None), DiscountTier.end_date >= today),
        )
        if tier_type is not None:
            stmt = stmt.where(DiscountTier.type == tier_type)
        stmt = stmt.order_by(DiscountTier.created_at.desc(), DiscountTier.id.desc())
        return list(session.exec(stmt).all())

    def save(self, session: Session, tier: DiscountTier) -> DiscountTier:
        session.add(tier)
        session.commit()
        session.refresh(tier)
        return tier

    def delete(self, session: Session, tier: DiscountTier) -> None:
        session.delete(tier)
        session.commit()
