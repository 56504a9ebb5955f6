"""Password hashing and access tokens."""
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from kaizen.config import settings
from kaizen.utils.timeutils import utc_now


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Example:
        >>> hash_password("mypassword123").startswith("$2b$")
        True
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a bcrypt hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


def create_access_token(
    user_id: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Issue a signed JWT whose subject is the internal user id.

    Args:
        user_id: Internal user id
        expires_delta: Optional lifetime, defaults to the configured one

    Returns:
        Encoded JWT
    """
    issued_at = utc_now()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expiration_minutes)

    claims = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> str:
    """
    Resolve a bearer token to the internal user id it was issued for.

    Raises:
        JWTError: If the token is malformed, expired, badly signed or has
            no subject
    """
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token payload missing 'sub' claim")
    return user_id
