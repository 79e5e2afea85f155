"""Label management API routes.

Labels organise contacts and belong to one of the user's WhatsApp numbers.
Responses keep the Laravel LabelController shapes.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.api.schemas import DataResponse, LabelCreate, LabelRead, PaginatedResponse, PaginationMeta
from app.db.models import Label, User, WhatsAppNumber

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/labels", tags=["labels"])


async def _find_active_number(
    session: AsyncSession, user_id: int, number_id: int | None
) -> WhatsAppNumber | None:
    query = select(WhatsAppNumber).where(
        WhatsAppNumber.user_id == user_id,
        WhatsAppNumber.deleted_at.is_(None),
    )
    if number_id:
        query = query.where(WhatsAppNumber.id == number_id)
    else:
        query = query.where(WhatsAppNumber.status == 1)

    result = await session.execute(query.limit(1))
    return result.scalars().first()


@router.get("", response_model=PaginatedResponse[LabelRead])
async def list_labels(
    number_id: int | None = Query(default=None, alias="id", description="ID do número WhatsApp"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaginatedResponse[LabelRead]:
    """List labels of the user's active WhatsApp number, newest first.

    Args:
        number_id: Optional WhatsApp number; defaults to the active one.
        session: Database session.
        current_user: Authenticated user.

    Returns:
        Labels wrapped in a single-page Laravel paginator envelope.

    Raises:
        HTTPException: 404 if the user has no matching WhatsApp number.
    """
    logger.info(f"Listing labels: user={current_user.id}, number={number_id}")

    number = await _find_active_number(session, current_user.id, number_id)
    if number is None:
        logger.warning(f"No active WhatsApp number for user {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Nenhum número WhatsApp ativo encontrado para este usuário.",
        )

    result = await session.execute(
        select(Label)
        .where(
            Label.user_id == current_user.id,
            Label.number_id == number.id,
            Label.deleted_at.is_(None),
        )
        .order_by(Label.created_at.desc(), Label.id.desc())
    )
    labels = result.scalars().all()

    logger.info(f"Found {len(labels)} labels")

    count = len(labels)
    return PaginatedResponse[LabelRead](
        data=[LabelRead.model_validate(label) for label in labels],
        meta=PaginationMeta.for_page(page=1, per_page=count, count=count, total=count),
    )


@router.post("", response_model=DataResponse[LabelRead], status_code=status.HTTP_201_CREATED)
async def create_label(
    label_data: LabelCreate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DataResponse[LabelRead]:
    """Create a label on one of the user's WhatsApp numbers.

    Raises:
        HTTPException: 400 if the number does not belong to the user.
    """
    logger.info(f"Creating label '{label_data.name}' for user {current_user.id}")

    result = await session.execute(
        select(WhatsAppNumber).where(
            WhatsAppNumber.id == label_data.number_id,
            WhatsAppNumber.user_id == current_user.id,
            WhatsAppNumber.deleted_at.is_(None),
        )
    )
    if result.scalar_one_or_none() is None:
        logger.warning(f"Number {label_data.number_id} does not belong to user {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="O número informado não pertence ao usuário.",
        )

    try:
        label = Label(
            user_id=current_user.id,
            number_id=label_data.number_id,
            name=label_data.name,
        )
        session.add(label)
        await session.commit()
        await session.refresh(label)
    except SQLAlchemyError as e:
        logger.error(f"Database error creating label: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao cadastrar a etiqueta.",
        ) from e

    logger.info(f"Created label #{label.id} {label.name}")
    return DataResponse[LabelRead](data=LabelRead.model_validate(label))


@router.delete("/{label_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_label(
    label_id: int = Path(description="ID da label"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    """Soft delete a label.

    Raises:
        HTTPException: 404 if the label does not exist for this user.
    """
    logger.info(f"Deleting label {label_id} for user {current_user.id}")

    result = await session.execute(
        select(Label).where(
            Label.id == label_id,
            Label.user_id == current_user.id,
            Label.deleted_at.is_(None),
        )
    )
    label = result.scalar_one_or_none()

    if label is None:
        logger.warning(f"Label not found for deletion: {label_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Label não encontrada.",
        )

    try:
        label.deleted_at = datetime.now(timezone.utc)
        await session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Database error deleting label: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao excluir a etiqueta.",
        ) from e

    logger.info(f"Deleted label #{label_id} {label.name}")
