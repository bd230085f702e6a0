from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import AuthenticationError, PermissionDeniedError
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import ExternalIdentity
from app.services.identity_service import IdentityService

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header does not raise here,
#   so local auth can fall back to the auth cookie.
bearer_scheme = HTTPBearer(auto_error=False)

user_repo = UserRepository()


# -------- External identity provider --------


def decode_identity_token(token: str) -> dict[str, Any]:
    """
    Verify a token issued by the external identity provider.

    Verification:
      - signature (IDP_JWT_ALG with IDP_JWT_KEY)
      - expiration time (exp)
      - issuer, only when IDP_ISSUER is configured
      - audience is NOT verified

    Raises:
        AuthenticationError: if token is invalid/expired.
    """
    options = {"verify_aud": False}
    try:
        return jwt.decode(
            token,
            settings.IDP_JWT_KEY,
            algorithms=[settings.IDP_JWT_ALG],
            issuer=settings.IDP_ISSUER,
            options=options,
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def get_external_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> ExternalIdentity:
    """
    Resolve the caller's identity-provider identity from the bearer token.

    Claims:
      - sub: external user id (required)
      - email
      - given_name / first_name, family_name / last_name
    """
    if credentials is None:
        raise AuthenticationError("Authorization header with Bearer token required")

    payload = decode_identity_token(credentials.credentials)
    sub = payload.get("sub")
    if not sub:
        raise AuthenticationError("Token missing sub")

    return ExternalIdentity(
        id=sub,
        email=payload.get("email"),
        first_name=payload.get("given_name") or payload.get("first_name"),
        last_name=payload.get("family_name") or payload.get("last_name"),
    )


# -------- Local email/password accounts --------


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))


def create_access_token(user: User) -> str:
    """Sign a local access token for `user`."""
    expires = datetime.now(timezone.utc) + timedelta(days=settings.JWT_EXPIRE_DAYS)
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": expires,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def get_local_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Bearer header first, then the auth cookie set at login."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


def get_current_user(
    token: str | None = Depends(get_local_token),
    session: Session = Depends(get_session),
) -> User:
    """
    Resolve the current local account from a locally issued token.

    Raises:
        AuthenticationError: missing/invalid token or unknown user.
    """
    if not token:
        raise AuthenticationError("Unauthorized: No token provided")

    payload = decode_access_token(token)
    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid sub in token")

    user = user_repo.get_by_id(session, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Enforce admin role.

    The role is read from the database, not from the token, so a
    demoted admin loses access immediately.

    Raises:
        PermissionDeniedError: if role is not admin.
    """
    if user.role != "admin":
        raise PermissionDeniedError("Forbidden: Admins only")
    return user


# -------- Customers (identity provider users) --------

identity_service = IdentityService(user_repo)


def get_current_customer(
    identity: ExternalIdentity = Depends(get_external_identity),
    session: Session = Depends(get_session),
) -> User:
    """
    Local user behind the identity-provider token.

    Raises:
        NotFoundError: the identity has not been synced yet.
    """
    return identity_service.get_user(session, identity)
