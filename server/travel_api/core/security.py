"""Password hashing and bearer token helpers."""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from .config import settings

TOKEN_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unrecognised or malformed stored hash
        return False


def create_access_token(
    user_id: int,
    email: str,
    name: str,
    role: str,
    expires_in: timedelta | None = None,
) -> str:
    """
    Issue a signed bearer token for a user.

    The ``sub`` claim carries the user ID as a string; ``role`` drives
    authorization decisions in the request layer.
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(hours=settings.jwt_expiry_hours)
    payload = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "role": role,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Validate a bearer token and return its claims.

    Raises:
        jwt.PyJWTError: If the signature, issuer, audience or expiry is invalid
    """
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[TOKEN_ALGORITHM],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        options={"require": ["exp", "sub"]},
    )
