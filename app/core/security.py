"""Password hashing and bearer token helpers.

Tokens are HS256 JWTs issued by the legacy auth service; ``sub`` carries the
user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.core.config import Settings, get_settings

# Same cost factor as the legacy application
BCRYPT_ROUNDS = 10


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be decoded or lacks a subject."""


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password.

    Returns:
        Hashed password.
    """
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def create_access_token(
    user_id: int,
    settings: Settings | None = None,
    expires_delta: timedelta = timedelta(hours=1),
) -> str:
    """Issue a token for ``user_id``. Used by seed scripts and tests."""
    settings = settings or get_settings()
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings | None = None) -> int:
    """Validate ``token`` and return the user id it was issued for.

    Raises:
        InvalidTokenError: If the signature, expiry or subject is invalid.
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as e:
        raise InvalidTokenError(f"Invalid subject: {subject!r}") from e
