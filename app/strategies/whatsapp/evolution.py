"""Evolution API WhatsApp provider.

Talks to an Evolution API server over HTTP. Every request goes through the
exponential backoff retry policy; only transport errors and 5xx responses
are retried.
"""

import asyncio
import logging
import re
from typing import Any

import httpx

from app.core.retry import RetryPolicy, retry_async
from app.interfaces.whatsapp_provider import (
    BaseWhatsAppProvider,
    InstanceInfo,
    SendResult,
    WhatsAppProviderError,
)

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_EVENTS = [
    "MESSAGES_UPSERT",
    "MESSAGES_UPDATE",
    "CONNECTION_UPDATE",
    "QRCODE_UPDATED",
]


def format_phone_number(phone: str) -> str:
    """Strip non-digits and add the Brazil country code to bare 11-digit numbers."""
    cleaned = re.sub(r"\D", "", phone)
    if not cleaned.startswith("55") and len(cleaned) == 11:
        cleaned = "55" + cleaned
    return cleaned


def is_retryable_error(error: Exception) -> bool:
    """Transport failures and server-side (5xx) responses are worth retrying."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


def _error_reason(error: Exception) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return str(error)


class EvolutionAPIProvider(BaseWhatsAppProvider):
    """WhatsApp provider backed by Evolution API v2.

    Attributes:
        base_url: Evolution API server URL.
        retry_policy: Backoff budget applied to every request.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        retry_policy: RetryPolicy | None = None,
        qr_wait: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            base_url: Evolution API server URL.
            api_key: Global API key, sent in the 'apikey' header.
            timeout: Request timeout in seconds.
            retry_policy: Retry budget. Defaults to 3 retries from 1s.
            qr_wait: Seconds to wait after creating an instance so the QR code is ready.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy()
        self._qr_wait = qr_wait
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json", "apikey": api_key},
            timeout=timeout,
            transport=transport,
        )

    @property
    def provider_name(self) -> str:
        return "evolution"

    async def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        async def send() -> dict[str, Any]:
            response = await self._client.request(method, path, json=payload)
            response.raise_for_status()
            if not response.content:
                return {}
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"Resposta inesperada da Evolution API: {type(data).__name__}")
            return data

        return await retry_async(
            send,
            max_retries=self.retry_policy.max_retries,
            base_delay=self.retry_policy.base_delay,
            max_delay=self.retry_policy.max_delay,
            should_retry=is_retryable_error,
            context={"method": method, "url": f"{self.base_url}{path}"},
        )

    async def create_instance(
        self,
        instance_name: str,
        webhook_url: str | None = None,
        qrcode: bool = True,
    ) -> InstanceInfo:
        logger.info(f"Creating WhatsApp instance: {instance_name}")

        payload: dict[str, Any] = {
            "instanceName": instance_name,
            "integration": "WHATSAPP-BAILEYS",
            "qrcode": qrcode,
        }
        if webhook_url:
            payload["webhook"] = {"url": webhook_url, "events": DEFAULT_WEBHOOK_EVENTS}

        try:
            data = await self._request("POST", "/instance/create", payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to create instance {instance_name}: {e}", exc_info=True)
            raise WhatsAppProviderError(f"Falha ao criar instância: {_error_reason(e)}") from e

        logger.info(f"Instance created: {instance_name}")

        if qrcode and self._qr_wait > 0:
            await asyncio.sleep(self._qr_wait)

        qr_data = data.get("qrcode")
        if not isinstance(qr_data, dict):
            qr_data = {}
        return InstanceInfo(
            instance_name=instance_name,
            status="qr",
            qr_code=qr_data.get("base64"),
            pairing_code=qr_data.get("pairingCode"),
        )

    async def send_text(self, instance_name: str, to: str, text: str) -> SendResult:
        logger.info(f"Sending text via {instance_name} to {to[:8]}***")

        payload = {"number": format_phone_number(to), "text": text}

        try:
            data = await self._request("POST", f"/message/sendText/{instance_name}", payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to send text via {instance_name}: {e}", exc_info=True)
            raise WhatsAppProviderError(f"Falha ao enviar mensagem: {_error_reason(e)}") from e

        key = data.get("key")
        message_id = (key.get("id") if isinstance(key, dict) else None) or data.get("messageId")
        logger.info(f"Text sent: {message_id}")

        return SendResult(
            success=True,
            message_id=message_id,
            timestamp=data.get("messageTimestamp"),
        )

    async def close(self) -> None:
        await self._client.aclose()
