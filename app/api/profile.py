"""User profile API routes.

``/profile`` acts on the authenticated user; ``/user/{user_id}`` are the
legacy Laravel routes kept for older clients.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.api.schemas import UserProfileRead, UserProfileUpdate
from app.core.security import hash_password
from app.db.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["profile"])

USER_NOT_FOUND = "Usuário não encontrado."
EMAIL_IN_USE = "Este email já está em uso."


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def _load_user(session: AsyncSession, user_id: int) -> User:
    result = await session.execute(
        select(User).where(User.id == user_id, User.deleted_at.is_(None))
    )
    user = result.scalar_one_or_none()
    if user is None:
        logger.warning(f"User not found: {user_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return user


async def get_profile(session: AsyncSession, user_id: int) -> UserProfileRead:
    """Load a live user's profile."""
    user = await _load_user(session, user_id)
    return UserProfileRead.model_validate(user)


async def update_profile(
    session: AsyncSession, user_id: int, profile_data: UserProfileUpdate
) -> UserProfileRead:
    """Apply a partial profile update.

    The email must be unique among all users, soft-deleted ones included.
    A new password needs a matching ``password_confirmation`` and is stored
    as a bcrypt hash.

    Args:
        session: Database session.
        user_id: User to update.
        profile_data: Fields to change.

    Returns:
        The updated profile.

    Raises:
        HTTPException: 404 if the user does not exist, 400 on a taken
            email or a bad password confirmation.
    """
    user = await _load_user(session, user_id)

    if profile_data.name is not None:
        user.name = profile_data.name
    if profile_data.last_name is not None:
        user.last_name = profile_data.last_name
    if profile_data.cel is not None:
        user.cel = profile_data.cel

    if profile_data.email and profile_data.email != user.email:
        # Soft-deleted rows still hold the unique index
        result = await session.execute(select(User.id).where(User.email == profile_data.email))
        owner_id = result.scalars().first()
        if owner_id is not None and owner_id != user_id:
            logger.warning(f"Email already in use: {profile_data.email}")
            raise _bad_request(EMAIL_IN_USE)
        user.email = profile_data.email

    if profile_data.password:
        if not profile_data.password_confirmation:
            raise _bad_request("As senhas devem ser iguais para confirmação.")
        if profile_data.password != profile_data.password_confirmation:
            raise _bad_request("As senhas não coincidem.")
        user.password = hash_password(profile_data.password)

    try:
        session.add(user)
        await session.commit()
        await session.refresh(user)
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Unique constraint violated updating user {user_id}: {e}")
        raise _bad_request(EMAIL_IN_USE) from e
    except SQLAlchemyError as e:
        logger.error(f"Database error updating user {user_id}: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao atualizar o perfil.",
        ) from e

    logger.info(f"Updated profile of user {user_id}")
    return UserProfileRead.model_validate(user)


@router.get("/profile", response_model=UserProfileRead)
async def read_own_profile(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserProfileRead:
    """Return the authenticated user's profile."""
    return await get_profile(session, current_user.id)


@router.put("/profile", response_model=UserProfileRead)
async def update_own_profile(
    profile_data: UserProfileUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserProfileRead:
    """Update the authenticated user's profile."""
    logger.info(f"Updating own profile: user={current_user.id}")
    return await update_profile(session, current_user.id, profile_data)


@router.get("/user/{user_id}", response_model=UserProfileRead)
async def read_user_profile(
    user_id: int = Path(description="ID do usuário"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserProfileRead:
    return await get_profile(session, user_id)


@router.post("/user/{user_id}", response_model=UserProfileRead)
async def update_user_profile(
    profile_data: UserProfileUpdate,
    user_id: int = Path(description="ID do usuário"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserProfileRead:
    logger.info(f"Updating profile of user {user_id} (by user {current_user.id})")
    return await update_profile(session, user_id, profile_data)
