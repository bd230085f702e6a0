import logging
from datetime import date, datetime, timezone

from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.discount import DiscountTier
from app.repositories.discount_repo import DiscountTierRepository
from app.schemas.discount import DiscountTierCreate, DiscountTierUpdate

logger = logging.getLogger(__name__)


class DiscountTierService:
    """
    Discount tier management.

    Tiers only describe pricing for the storefront; they are never
    applied server-side at order placement.
    """

    def __init__(self, repo: DiscountTierRepository):
        self.repo = repo

    def _check_tier(self, session: Session, tier: DiscountTier) -> None:
        """Cross-field rules, checked on the row as it would be saved."""
        if tier.apply_type == "CODE" and not tier.discount_code:
            raise ValidationError("discount_code is required for CODE tiers")

        if (
            tier.min_quantity is not None
            and tier.max_quantity is not None
            and tier.min_quantity > tier.max_quantity
        ):
            raise ValidationError("min_quantity cannot exceed max_quantity")

        if (
            tier.start_date is not None
            and tier.end_date is not None
            and tier.start_date > tier.end_date
        ):
            raise ValidationError("start_date cannot be after end_date")

        if tier.discount_code:
            owner = self.repo.get_by_code(session, tier.discount_code)
            if owner is not None and owner.id != tier.id:
                raise ConflictError(f"Discount code already exists: {tier.discount_code}")

    def list_tiers(
        self,
        session: Session,
        only_active: bool = True,
        tier_type: str | None = None,
    ) -> list[DiscountTier]:
        return self.repo.list_tiers(session, only_active=only_active, tier_type=tier_type)

    def list_current(
        self,
        session: Session,
        tier_type: str | None = None,
        today: date | None = None,
    ) -> list[DiscountTier]:
        """Tiers the storefront should apply today."""
        return self.repo.list_current(
            session, today or date.today(), tier_type=tier_type
        )

    def get_tier(self, session: Session, tier_id: int) -> DiscountTier:
        tier = self.repo.get_by_id(session, tier_id)
        if tier is None:
            raise NotFoundError("Discount tier not found")
        return tier

    def create_tier(self, session: Session, payload: DiscountTierCreate) -> DiscountTier:
        tier = DiscountTier(**payload.model_dump())
        self._check_tier(session, tier)
        tier = self.repo.save(session, tier)
        logger.info(f"Discount tier {tier.id} created ({tier.apply_type}, {tier.type})")
        return tier

    def update_tier(
        self,
        session: Session,
        tier_id: int,
        payload: DiscountTierUpdate,
    ) -> DiscountTier:
        tier = self.get_tier(session, tier_id)
        changes = payload.model_dump(exclude_none=True)

        # Rules run on a detached copy; the stored row is untouched until they pass
        self._check_tier(session, DiscountTier(**{**tier.model_dump(), **changes}))

        for field, value in changes.items():
            setattr(tier, field, value)
        tier.updated_at = datetime.now(timezone.utc)
        return self.repo.save(session, tier)

    def delete_tier(self, session: Session, tier_id: int) -> None:
        tier = self.get_tier(session, tier_id)
        self.repo.delete(session, tier)
