import logging
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import ExternalIdentity

logger = logging.getLogger(__name__)


class IdentityService:
    """
    Maps identity-provider identities to local User rows.

    Lookup order is always: external id first, then email.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def _lookup(self, session: Session, identity: ExternalIdentity) -> User | None:
        user = self.repo.get_by_external_id(session, identity.id)
        if user is None and identity.email:
            user = self.repo.get_by_email(session, identity.email)
        return user

    def get_user(self, session: Session, identity: ExternalIdentity) -> User:
        """
        Read-only resolution used by customer endpoints.

        Raises:
            NotFoundError: the identity was never synced.
        """
        user = self._lookup(session, identity)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def sync_user(self, session: Session, identity: ExternalIdentity) -> User:
        """
        Find-or-create the local user for an identity.

        - Match by external id, else by email.
        - On an email match without an external id, link the account
          by backfilling external_id.
        - Names from the identity overwrite stored names when present.
        - Otherwise create a new user with role "user".

        Raises:
            ValidationError: the identity carries no email.
        """
        if not identity.email:
            raise ValidationError("User email is required")

        user = self._lookup(session, identity)

        if user is None:
            user = User(
                external_id=identity.id,
                email=identity.email,
                first_name=identity.first_name,
                last_name=identity.last_name,
                role="user",
            )
            logger.info(f"Creating user for external identity {identity.id}")
            return self.repo.save(session, user)

        if user.external_id is None:
            logger.info(f"Linking user {user.id} to external identity {identity.id}")
            user.external_id = identity.id

        if identity.first_name is not None:
            user.first_name = identity.first_name
        if identity.last_name is not None:
            user.last_name = identity.last_name
        user.updated_at = datetime.now(timezone.utc)

        return self.repo.save(session, user)
