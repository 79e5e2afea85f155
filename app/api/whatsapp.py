"""WhatsApp connection API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_whatsapp_provider
from app.api.schemas import WhatsAppNumberSummary, WhatsAppSetupRequest, WhatsAppSetupResponse
from app.core.config import Settings, get_settings
from app.db.models import User, WhatsAppNumber
from app.interfaces.whatsapp_provider import BaseWhatsAppProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/whatsapp", tags=["whatsapp"])

DEFAULT_NUMBER_NAME = "WhatsApp Principal"


@router.post("/setup", response_model=WhatsAppSetupResponse)
async def setup_whatsapp(
    setup_data: WhatsAppSetupRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    provider: BaseWhatsAppProvider = Depends(get_whatsapp_provider),
    settings: Settings = Depends(get_settings),
) -> WhatsAppSetupResponse:
    """Create (or reuse) a WhatsApp instance and bind it to the user.

    The user's active number is created when missing and updated with the
    instance name, QR code and connection state returned by the provider.

    Args:
        setup_data: Instance name, optional display name and webhook URL.
        session: Database session.
        current_user: Authenticated user.
        provider: WhatsApp gateway.
        settings: Application settings.

    Returns:
        Setup outcome with the stored number and QR code.

    Raises:
        HTTPException: 400 on any provider, response or database failure.
    """
    instance_name = setup_data.instanceName
    logger.info(f"Setting up WhatsApp for user {current_user.id}: instance={instance_name}")

    webhook_url = setup_data.webhookUrl or settings.whatsapp_webhook_url
    if not webhook_url:
        logger.warning(
            "Webhook URL not configured (EVOLUTION_API_WEBHOOK_URL or APP_URL); "
            "QR code updates may not arrive"
        )

    try:
        instance = await provider.create_instance(
            instance_name, webhook_url=webhook_url, qrcode=True
        )

        result = await session.execute(
            select(WhatsAppNumber).where(
                WhatsAppNumber.user_id == current_user.id,
                WhatsAppNumber.status == 1,
                WhatsAppNumber.deleted_at.is_(None),
            )
        )
        number = result.scalars().first()

        if number is None:
            number = WhatsAppNumber(
                user_id=current_user.id,
                name=setup_data.name or DEFAULT_NUMBER_NAME,
                instance=instance_name,
                status=1,
                status_connection=0,
            )

        number.instance = instance_name
        number.status_connection = 1 if instance.status == "connected" else 0
        number.qrcode = instance.qr_code
        if setup_data.name:
            number.name = setup_data.name

        session.add(number)
        await session.commit()
        await session.refresh(number)
    except Exception as e:
        logger.error(f"WhatsApp setup failed for user {current_user.id}: {e}", exc_info=True)
        if isinstance(e, SQLAlchemyError):
            await session.rollback()
        reason = str(e) or "Erro desconhecido"
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Erro ao configurar WhatsApp: {reason}",
        ) from e

    logger.info(
        f"WhatsApp configured: number={number.id}, instance={instance_name}, "
        f"qr_code={'present' if instance.qr_code else 'absent'}"
    )

    message = (
        "WhatsApp conectado com sucesso"
        if instance.status == "connected"
        else "WhatsApp configurado. Escaneie o QR Code para conectar."
    )
    return WhatsAppSetupResponse(
        success=True,
        message=message,
        number=WhatsAppNumberSummary(
            id=number.id,
            name=number.name,
            instance_name=instance_name,
            qr_code=instance.qr_code,
            pairing_code=instance.pairing_code,
            status=instance.status,
        ),
    )
