from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from app.core.auth import (
    decode_access_token,
    get_current_customer,
    get_external_identity,
    get_local_token,
    identity_service,
)
from app.core.config import get_settings
from app.core.errors import AppError
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.common import ApiResponse
from app.schemas.user import (
    AuthSession,
    ExternalIdentity,
    LoginRequest,
    ProfileUpdate,
    SignupRequest,
    TokenVerification,
    UserRead,
)
from app.services.user_service import UserService

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = UserService(repo)


# -------- Local email/password accounts --------


@router.post(
    "/signup",
    response_model=ApiResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
)
def signup(
    payload: SignupRequest,
    session: Session = Depends(get_session),
):
    """
    Create a local account (role="user").
    """
    user = service.signup(session, payload)
    return {
        "success": True,
        "message": "User created",
        "data": UserRead.model_validate(user),
    }


@router.post("/login", response_model=ApiResponse[AuthSession])
def login(
    payload: LoginRequest,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Log in with email/password.

    The token is returned in the body and also set as an httpOnly
    cookie for browser clients.
    """
    user, token = service.login(session, payload)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="none" if settings.AUTH_COOKIE_SECURE else "lax",
        max_age=settings.JWT_EXPIRE_DAYS * 24 * 60 * 60,
        path="/",
    )
    return {
        "success": True,
        "message": "Login successful",
        "data": AuthSession(user=UserRead.model_validate(user), token=token),
    }


@router.post("/logout", response_model=ApiResponse[None])
def logout(response: Response):
    """Clear the auth cookie."""
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME, path="/")
    return {"success": True, "message": "Logged out successfully"}


@router.get("/verify", response_model=ApiResponse[TokenVerification])
def verify(
    token: str | None = Depends(get_local_token),
    session: Session = Depends(get_session),
):
    """
    Check a local token (header or cookie) without failing the request.
    """
    if not token:
        return {
            "success": True,
            "message": "No authentication token",
            "data": TokenVerification(valid=False),
        }

    try:
        payload = decode_access_token(token)
        user = repo.get_by_id(session, int(payload.get("sub", "")))
    except (AppError, TypeError, ValueError):
        user = None

    if user is None:
        return {
            "success": True,
            "message": "Invalid or expired token",
            "data": TokenVerification(valid=False),
        }
    return {
        "success": True,
        "data": TokenVerification(valid=True, user=UserRead.model_validate(user)),
    }


# -------- Identity provider users --------


@router.post("/sync-user", response_model=ApiResponse[UserRead])
def sync_user(
    identity: ExternalIdentity = Depends(get_external_identity),
    session: Session = Depends(get_session),
):
    """
    Create or update the local user for the identity-provider account.

    Existing local accounts with the same email are linked.
    """
    user = identity_service.sync_user(session, identity)
    return {"success": True, "data": UserRead.model_validate(user)}


@router.get("/me", response_model=ApiResponse[UserRead])
def read_me(current_user: User = Depends(get_current_customer)):
    """Return the synced profile of the identity-provider user."""
    return {"success": True, "data": UserRead.model_validate(current_user)}


@router.get("/profile", response_model=ApiResponse[UserRead])
def read_profile(current_user: User = Depends(get_current_customer)):
    return {"success": True, "data": UserRead.model_validate(current_user)}


@router.put("/profile", response_model=ApiResponse[UserRead])
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    """
    Update first name, last name and phone.
    """
    user = service.update_profile(session, current_user, payload)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": UserRead.model_validate(user),
    }
