"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- Authentication (bearer token guard)
- WhatsApp provider
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.factory import get_factory
from app.core.security import InvalidTokenError, decode_access_token
from app.db.models import User, UserStatus
from app.db.session import get_async_session
from app.interfaces.whatsapp_provider import BaseWhatsAppProvider

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Token inválido"
INACTIVE_ACCOUNT_MESSAGE = (
    "A sua conta foi inativa, entre em contato com nosso suporte por favor."
)


async def get_db(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Args:
        settings: Application settings.

    Yields:
        An async database session.
    """
    try:
        async for session in get_async_session(settings):
            yield session
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error during request: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro de conexão com o banco de dados.",
        ) from e


def _unauthorized(detail: str = INVALID_TOKEN_MESSAGE) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: str | None = Header(default=None, description="Bearer token"),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Dependency for getting the authenticated user from the bearer token.

    Args:
        authorization: The Authorization header.
        session: Database session.
        settings: Application settings.

    Returns:
        The authenticated user.

    Raises:
        HTTPException: 401 if the token is missing or invalid, the user does
            not exist, or the account is inactive.
    """
    if not authorization:
        logger.warning("Authorization header is missing")
        raise _unauthorized("Não autenticado")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        logger.warning("Authorization header is not a bearer token")
        raise _unauthorized()

    try:
        user_id = decode_access_token(token, settings)
    except InvalidTokenError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise _unauthorized() from e

    result = await session.execute(
        select(User).where(User.id == user_id, User.deleted_at.is_(None))
    )
    user = result.scalar_one_or_none()

    if user is None:
        logger.warning(f"Token subject not found: {user_id}")
        raise _unauthorized()

    if user.status == UserStatus.INACTIVED.value:
        logger.warning(f"Inactive user attempted access: {user_id}")
        raise _unauthorized(INACTIVE_ACCOUNT_MESSAGE)

    return user


def get_whatsapp_provider() -> BaseWhatsAppProvider:
    """Dependency returning the configured WhatsApp provider."""
    return get_factory().get_whatsapp_provider()
