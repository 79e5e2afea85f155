"""Message template API routes.

Reusable message texts with ``{{variable}}`` placeholders. The list of
placeholders is extracted from the content and stored as a JSON array
unless the client sends its own list. Compatible with the Laravel
MessageTemplatesController.
"""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.api.schemas import (
    MessageTemplateCreate,
    MessageTemplateRead,
    MessageTemplateUpdate,
    SuccessResponse,
    TemplateRenderRequest,
    TemplateRenderResponse,
)
from app.db.models import MessageTemplate, User
from app.strategies.template_engine import extract_variables, render_template

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/message-templates", tags=["message-templates"])

TEMPLATE_NOT_FOUND = "Template não encontrado."


async def _get_template(session: AsyncSession, user_id: int, template_id: int) -> MessageTemplate:
    """Fetch a live template owned by ``user_id`` or raise 404."""
    result = await session.execute(
        select(MessageTemplate).where(
            MessageTemplate.id == template_id,
            MessageTemplate.user_id == user_id,
            MessageTemplate.deleted_at.is_(None),
        )
    )
    template = result.scalar_one_or_none()

    if template is None:
        logger.warning(f"Template not found: {template_id} (user {user_id})")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TEMPLATE_NOT_FOUND)

    return template


async def _save(session: AsyncSession, template: MessageTemplate, action: str) -> None:
    try:
        session.add(template)
        await session.commit()
        await session.refresh(template)
    except SQLAlchemyError as e:
        logger.error(f"Database error on template {action}: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao salvar o template.",
        ) from e


@router.get("", response_model=list[MessageTemplateRead])
async def list_templates(
    search: str | None = Query(default=None, description="Buscar por nome ou conteúdo"),
    category: str | None = Query(default=None, description="Filtrar por categoria"),
    active: int | None = Query(default=None, description="Filtrar por status (1 ou 0)"),
    page: int = Query(default=1, ge=1, description="Página atual"),
    per_page: int = Query(default=15, ge=1, description="Itens por página"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[MessageTemplateRead]:
    """List the user's templates, newest first.

    Only the data array is returned, as the Laravel client expects; the
    page window is still applied.

    Args:
        search: Substring matched against name and content.
        category: Exact category filter.
        active: 1 or 0.
        page: 1-based page number.
        per_page: Page size.
        session: Database session.
        current_user: Authenticated user.

    Returns:
        Templates on the requested page.
    """
    logger.info(
        f"Listing templates: user={current_user.id}, search={search!r}, "
        f"category={category}, active={active}, page={page}, per_page={per_page}"
    )

    query = select(MessageTemplate).where(
        MessageTemplate.user_id == current_user.id,
        MessageTemplate.deleted_at.is_(None),
    )

    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(MessageTemplate.name.like(pattern), MessageTemplate.content.like(pattern))
        )

    if category:
        query = query.where(MessageTemplate.category == category)

    if active is not None:
        query = query.where(MessageTemplate.active == active)

    count_result = await session.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar_one() or 0

    query = (
        query.order_by(MessageTemplate.created_at.desc(), MessageTemplate.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    result = await session.execute(query)
    templates = result.scalars().all()

    logger.info(f"Found {len(templates)} of {total} templates")

    return [MessageTemplateRead.model_validate(template) for template in templates]


@router.post("", response_model=MessageTemplateRead, status_code=status.HTTP_201_CREATED)
async def create_template(
    template_data: MessageTemplateCreate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageTemplateRead:
    """Create a template, extracting its variables when none are given."""
    logger.info(f"Creating template '{template_data.name}' for user {current_user.id}")

    variables = (
        template_data.variables
        if template_data.variables is not None
        else extract_variables(template_data.content)
    )

    template = MessageTemplate(
        user_id=current_user.id,
        name=template_data.name,
        content=template_data.content,
        category=template_data.category or None,
        variables=json.dumps(variables),
        active=template_data.active if template_data.active is not None else 1,
    )
    await _save(session, template, "create")

    logger.info(f"Created template #{template.id} with variables {variables}")
    return MessageTemplateRead.model_validate(template)


@router.put("/{template_id}", response_model=MessageTemplateRead)
async def update_template(
    template_data: MessageTemplateUpdate,
    template_id: int = Path(description="ID do template"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageTemplateRead:
    """Partially update a template.

    An explicit ``variables`` list wins; otherwise variables are extracted
    again whenever ``content`` changes.
    """
    logger.info(f"Updating template {template_id} for user {current_user.id}")

    template = await _get_template(session, current_user.id, template_id)
    changes = template_data.model_dump(exclude_unset=True)

    for field in ("name", "content", "active"):
        if field in changes and changes[field] is not None:
            setattr(template, field, changes[field])
    # category is nullable, so an explicit null clears it
    if "category" in changes:
        template.category = changes["category"]

    if template_data.variables is not None:
        template.variables = json.dumps(template_data.variables)
    elif template_data.content is not None:
        template.variables = json.dumps(extract_variables(template_data.content))

    await _save(session, template, "update")

    logger.info(f"Updated template #{template.id}")
    return MessageTemplateRead.model_validate(template)


@router.delete("/{template_id}", response_model=SuccessResponse)
async def delete_template(
    template_id: int = Path(description="ID do template"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    """Soft delete a template."""
    logger.info(f"Deleting template {template_id} for user {current_user.id}")

    template = await _get_template(session, current_user.id, template_id)
    template.deleted_at = datetime.now(timezone.utc)
    await _save(session, template, "delete")

    logger.info(f"Deleted template #{template_id}")
    return SuccessResponse(success=True, message="Template deletado com sucesso.")


@router.post("/{template_id}/render", response_model=TemplateRenderResponse)
async def render_message_template(
    render_request: TemplateRenderRequest,
    template_id: int = Path(description="ID do template"),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TemplateRenderResponse:
    """Preview a template with the given placeholder values.

    Placeholders without a value in ``data`` are left as written.
    """
    template = await _get_template(session, current_user.id, template_id)

    rendered = render_template(template.content, render_request.data)

    logger.info(f"Rendered template #{template_id} with {len(render_request.data)} values")
    return TemplateRenderResponse(content=rendered)
