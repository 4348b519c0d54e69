"""Bearer token utilities.

Tokens are issued by the identity provider; this service only verifies them.
``create_access_token`` mints tokens with the same claims for tests and
operator scripts.
"""
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from timesheet_api.config import settings
from timesheet_api.models.user import Caller, UserRole


def create_access_token(
    user_id: str,
    role: UserRole = UserRole.USER,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: User ID to encode in token
        role: Role claim
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token(user_id="user123", role=UserRole.ADMIN)
        >>> isinstance(token, str)
        True
    """
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.jwt_expiration_minutes)

    to_encode = {
        "sub": user_id,
        "role": UserRole(role).value,
        "exp": expire,
    }

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Caller:
    """
    Verify and decode a JWT access token.

    Args:
        token: JWT token string to verify

    Returns:
        Caller built from the ``sub`` and ``role`` claims. A missing role
        claim means a regular user.

    Raises:
        JWTError: If token is invalid, expired or carries an unknown role

    Example:
        >>> token = create_access_token(user_id="user123")
        >>> verify_access_token(token).user_id
        'user123'
    """
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    user_id = payload.get("sub")

    if user_id is None:
        raise JWTError("Token payload missing 'sub' claim")

    try:
        role = UserRole(payload.get("role", UserRole.USER.value))
    except ValueError:
        raise JWTError("Token carries an unknown role")

    return Caller(user_id=user_id, role=role)
