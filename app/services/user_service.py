from datetime import datetime, timezone

from sqlmodel import Session

from app.core.auth import create_access_token, hash_password, verify_password
from app.core.errors import NotFoundError, ValidationError
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    LoginRequest,
    ProfileUpdate,
    SignupRequest,
    UserRoleUpdate,
)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - local email/password signup and login
      - profile edits
      - admin user management
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Local accounts -----

    def signup(self, session: Session, payload: SignupRequest) -> User:
        """
        Create a local account.

        Role is always "user"; admins are promoted via update_role.
        """
        if self.repo.get_by_email(session, payload.email) is not None:
            raise ValidationError("Email already exists")

        user = User(
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            role="user",
            password_hash=hash_password(payload.password),
        )
        return self.repo.save(session, user)

    def login(self, session: Session, payload: LoginRequest) -> tuple[User, str]:
        """
        Check credentials and issue an access token.

        The same message is used for unknown email and wrong password.
        """
        user = self.repo.get_by_email(session, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise ValidationError("Invalid credentials")
        return user, create_access_token(user)

    # ----- Self profile -----

    def update_profile(
        self,
        session: Session,
        current_user: User,
        payload: ProfileUpdate,
    ) -> User:
        current_user.first_name = payload.first_name
        current_user.last_name = payload.last_name
        current_user.phone = payload.phone
        current_user.updated_at = datetime.now(timezone.utc)
        return self.repo.save(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int,
        limit: int,
        role: str | None = None,
    ) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list_users(session, skip=skip, limit=limit, role=role)

    def get_user(self, session: Session, user_id: int) -> User:
        """
        Get a user by id (admin only).

        Raises:
            NotFoundError: if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_role(
        self,
        session: Session,
        user_id: int,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        user.role = payload.role
        user.updated_at = datetime.now(timezone.utc)
        return self.repo.save(session, user)
