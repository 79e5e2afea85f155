"""Celery worker entry point.

Background worker for sending WhatsApp messages asynchronously.
Uses an event loop to run async tasks within Celery workers.
"""

import asyncio
import json
import logging
import traceback
from typing import Any

import structlog
from celery import Celery, shared_task
from celery.signals import task_failure, worker_ready
from sqlalchemy import text

from app.core.config import Settings, get_settings
from app.core.factory import ComponentFactory
from app.db.session import get_async_session
from app.interfaces.whatsapp_provider import WhatsAppProviderError
from app.strategies.template_engine import render_template

logger = logging.getLogger(__name__)

# Initialize Celery app
settings: Settings = get_settings()

celery_app = Celery(
    "mensageria_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.worker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,
    task_soft_time_limit=270,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=200,
)


# =============================================================================
# Job error helpers
# =============================================================================


def get_error_message(error: object) -> str:
    """Readable message for anything a job may raise or report."""
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    return json.dumps(error, default=str)


def get_error_stack(error: object) -> str:
    """Formatted traceback of an exception, or the message for non-exceptions."""
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return get_error_message(error)


def get_job_error_details(error: object) -> dict[str, Any]:
    """Collect message, stack and code (when present) of a job error.

    Args:
        error: The raised exception, or any other reported value.

    Returns:
        ``{"message": ...}`` plus ``stack`` for exceptions and ``code`` when
        the exception carries one (``code`` attribute or ``errno``).
    """
    if not isinstance(error, BaseException):
        return {"message": get_error_message(error)}

    details: dict[str, Any] = {
        "message": get_error_message(error),
        "stack": get_error_stack(error),
    }
    code = getattr(error, "code", None)
    if code is None:
        code = getattr(error, "errno", None)
    if code is not None:
        details["code"] = str(code)
    return details


# =============================================================================
# Signals
# =============================================================================


@worker_ready.connect
def on_worker_ready(**kwargs):
    """Log when worker is ready."""
    logger.info("Celery worker is ready and listening for tasks")


@task_failure.connect
def on_task_failure(sender=None, task_id=None, exception=None, args=None, kwargs=None, **extra):
    """Log every failed job with its context.

    Runs after Celery has given up on the task (retries exhausted or a
    non-retryable error); Celery still records the failure itself.
    """
    request = getattr(sender, "request", None)
    job_logger = structlog.get_logger("app.worker.jobs")
    details = get_job_error_details(exception)
    job_logger.error(
        "queue_job_failed",
        job_id=task_id,
        job_name=getattr(sender, "name", None),
        args=args,
        kwargs=kwargs,
        retries=getattr(request, "retries", None),
        error=details["message"],
        stack=details.get("stack"),
        code=details.get("code"),
    )


def run_async(coro):
    """Run an async coroutine in a new event loop.

    Celery workers don't have a running event loop, so we need
    to create one for async operations.

    Args:
        coro: The async coroutine to run.

    Returns:
        The result of the coroutine.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# =============================================================================
# Message Tasks
# =============================================================================


@shared_task(
    bind=True,
    name="app.worker.send_template_message",
    autoretry_for=(WhatsAppProviderError,),
    retry_backoff=True,
    retry_backoff_max=int(settings.retry_max_delay),
    retry_jitter=False,
    max_retries=settings.retry_max_retries,
)
def send_template_message_task(
    self,
    instance_name: str,
    phone: str,
    content: str,
    data: dict[str, Any] | None = None,
) -> dict:
    """Render a message template and send it through WhatsApp.

    Provider failures are retried by Celery with exponential backoff; other
    errors fail the job immediately.

    Args:
        self: Celery task instance (for bind=True).
        instance_name: WhatsApp instance that sends the message.
        phone: Recipient phone number, any formatting.
        content: Template content with ``{{variable}}`` placeholders.
        data: Placeholder values.

    Returns:
        Dict with the send result.
    """
    logger.info(
        f"Sending template message via {instance_name} "
        f"(attempt {self.request.retries + 1})"
    )
    return run_async(_send_template_message_async(instance_name, phone, content, data or {}))


async def _send_template_message_async(
    instance_name: str,
    phone: str,
    content: str,
    data: dict[str, Any],
    factory: ComponentFactory | None = None,
) -> dict:
    if not phone:
        raise ValueError("Telefone do destinatário é obrigatório.")

    message = render_template(content, data)
    if not message.strip():
        raise ValueError("Mensagem vazia após renderização.")

    # httpx clients are bound to the loop that created them
    factory = factory or ComponentFactory(get_settings())
    provider = factory.get_whatsapp_provider()
    try:
        result = await provider.send_text(instance_name, phone, message)
    finally:
        await factory.aclose()

    logger.info(f"Template message sent via {instance_name}: {result.message_id}")
    return {
        "status": "sent",
        "instance_name": instance_name,
        "message_id": result.message_id,
        "timestamp": result.timestamp,
    }


@shared_task(name="app.worker.health_check")
def health_check_task() -> dict:
    """Health check task for monitoring worker status.

    Returns:
        Dict with worker health status.
    """
    logger.debug("Running health check")
    return run_async(_health_check_async())


async def _health_check_async() -> dict:
    settings = get_settings()

    try:
        async for session in get_async_session(settings):
            await session.execute(text("SELECT 1"))
        logger.debug("Database health check passed")
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": get_error_message(e),
        }

    return {
        "status": "healthy",
        "database": "connected",
    }
