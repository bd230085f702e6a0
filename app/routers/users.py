from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.user_repo import UserRepository
from app.schemas.common import ApiResponse
from app.schemas.user import Role, UserRead, UserRoleUpdate
from app.services.user_service import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_admin)],
)

repo = UserRepository()
service = UserService(repo)


@router.get("", response_model=ApiResponse[list[UserRead]])
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    role: Role | None = None,
):
    """
    List all users (admin only).

    Pagination via skip/limit, optional `role` filter.
    """
    users = service.list_users(session, skip, limit, role)
    return {"success": True, "data": [UserRead.model_validate(u) for u in users]}


@router.get("/{user_id}", response_model=ApiResponse[UserRead])
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id (admin only).
    """
    return {"success": True, "data": UserRead.model_validate(service.get_user(session, user_id))}


@router.patch("/{user_id}/role", response_model=ApiResponse[UserRead])
def change_role(
    user_id: int,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only).

    Allowed roles: user, admin.
    """
    user = service.update_role(session, user_id, payload)
    return {"success": True, "data": UserRead.model_validate(user)}
