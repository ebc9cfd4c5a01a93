"""Signed session tokens carried in the auth_token cookie."""
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from app.config import settings
from app.errors import UnauthenticatedError


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT whose subject is the user id."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {
        "sub": str(user_id),
        "exp": datetime.utcnow() + expires_delta,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> UUID:
    """
    Verify the signature and expiry of a session token and return its user id.

    Raises:
        UnauthenticatedError: tampered, expired or malformed token
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise UnauthenticatedError("Invalid token.")

    if payload.get("type") != "access":
        raise UnauthenticatedError("Invalid token.")
    try:
        return UUID(payload.get("sub") or "")
    except ValueError:
        raise UnauthenticatedError("Invalid token.")
