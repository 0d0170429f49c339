"""
Security utilities for authentication

Sessions are owned by the hosted auth provider; this service only verifies
the HS256 access tokens it issues. create_access_token mints tokens of the
same shape for local tooling and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt

from netatrack.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.setdefault("aud", settings.AUTH_JWT_AUDIENCE)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def verify_token(token: str) -> Optional[dict]:
    """Verify an access token. Returns the claims, or None if invalid."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError:
        return None

    if not payload.get("sub"):
        return None

    return payload
