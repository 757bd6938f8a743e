"""FastAPI dependencies for database sessions and bearer-token authentication."""

from typing import Optional

import jwt
from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User, UserRole
from .database import get_db
from .exceptions import AuthenticationError, AuthorizationError
from .security import decode_access_token


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: Identity and role of the account named by the token, as stored now

    Raises:
        AuthenticationError: If the header is missing, the token is invalid,
            or the account no longer exists or is disabled
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(detail="Token has expired")
    except jwt.PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {e}")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError(detail="Invalid token payload")

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None or not user.is_active:
        raise AuthenticationError(detail="User account not found or disabled")

    return {
        "user_id": user.id,
        "email": user.email,
        "name": user.full_name,
        "role": user.role,
    }


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """
    Authorization dependency that admits administrators only.

    Raises:
        AuthorizationError: If the authenticated user is not an administrator
    """
    if not is_admin(current_user):
        raise AuthorizationError(required_roles=[UserRole.ADMIN.value])
    return current_user


def is_admin(current_user: dict) -> bool:
    return current_user.get("role") == UserRole.ADMIN.value


def ensure_self_or_admin(current_user: dict, user_id: int, detail: str) -> None:
    """Raise AuthorizationError unless the caller is ``user_id`` or an administrator."""
    if current_user["user_id"] != user_id and not is_admin(current_user):
        raise AuthorizationError(detail=detail)


DatabaseSession = Depends(get_db)
RequiredAuth = Depends(get_current_user)
AdminAuth = Depends(require_admin)
