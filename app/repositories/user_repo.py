from sqlmodel import Session, select

from app.models.user import User


class UserRepository:
    """
    Queries over the users table.

    Accounts are looked up three ways: primary key (local tokens),
    identity-provider subject, and email (login and account linking).
    """

    def get_by_id(self, session: Session, user_id: int) -> User | None:
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        return session.exec(select(User).where(User.email == email)).first()

    def get_by_external_id(self, session: Session, external_id: str) -> User | None:
        return session.exec(
            select(User).where(User.external_id == external_id)
        ).first()

    def list_users(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        role: str | None = None,
    ) -> list[User]:
        """Users in id order, optionally only one role."""
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.id).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def save(self, session: Session, user: User) -> User:
        """Insert or update, commit, and return the fresh row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
