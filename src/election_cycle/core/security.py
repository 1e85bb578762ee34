"""JWT token creation/validation and password hashing.

Tokens carry the caller's identity as ``sub``; every command that needs "a
specific, verifiable identity" resolves it from a decoded access token.
Uses PyJWT for JWT operations and passlib with bcrypt for password hashing.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def _encode(
    subject: str,
    token_type: str,
    lifetime: timedelta,
    secret_key: str,
    algorithm: str,
    **claims: Any,
) -> str:
    payload: dict[str, Any] = {
        "sub": subject,
        "exp": datetime.now(UTC) + lifetime,
        "type": token_type,
        **claims,
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def create_access_token(
    subject: str,
    role: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 30,
) -> str:
    """Create a JWT access token.

    Args:
        subject: The caller identity.
        role: The account role (``operator`` or ``member``).
        secret_key: Secret key for signing.
        algorithm: JWT signing algorithm.
        expires_minutes: Token expiration in minutes.

    Returns:
        The encoded JWT string.
    """
    return _encode(
        subject,
        ACCESS_TOKEN_TYPE,
        timedelta(minutes=expires_minutes),
        secret_key,
        algorithm,
        role=role,
    )


def create_refresh_token(
    subject: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_days: int = 7,
) -> str:
    """Create a JWT refresh token for ``subject``."""
    return _encode(subject, REFRESH_TOKEN_TYPE, timedelta(days=expires_days), secret_key, algorithm)


def decode_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
) -> dict:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the token is invalid.
    """
    return jwt.decode(token, secret_key, algorithms=[algorithm])
