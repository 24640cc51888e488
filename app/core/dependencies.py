"""Authentication dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Header

from app.core.database import DbSession
from app.core.exceptions import AuthenticationError, PermissionDeniedError
from app.core.security import verify_access_token
from app.models.user import User, UserRole


def bearer_token(authorization: str = Header(..., description="Bearer token")) -> str:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid authorization header format")
    return token.strip()


def get_current_user(db: DbSession, token: Annotated[str, Depends(bearer_token)]) -> User:
    """Resolve the active user behind an access token."""
    payload = verify_access_token(token)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = int(payload.get("sub", ""))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")
    return user


def require_admin(user: Annotated[User, Depends(get_current_user)]) -> User:
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required", required_role=UserRole.ADMIN.value)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
