"""Abstract base class for WhatsApp gateway strategies.

The Strategy Pattern keeps the HTTP handlers and queue tasks independent of
the concrete WhatsApp gateway (Evolution API today).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class WhatsAppProviderError(Exception):
    """Raised when the WhatsApp gateway rejects or fails a request."""


@dataclass(frozen=True)
class InstanceInfo:
    """State of a WhatsApp instance as reported by the gateway.

    Attributes:
        instance_name: Gateway-side instance identifier.
        status: One of 'connected', 'disconnected', 'connecting', 'qr'.
        qr_code: Base64 data URL of the pairing QR code, when available.
        pairing_code: Numeric pairing code, when the gateway issues one.
    """

    instance_name: str
    status: str
    qr_code: str | None = None
    pairing_code: str | None = None


@dataclass(frozen=True)
class SendResult:
    """Outcome of a message send."""

    success: bool
    message_id: str | None = None
    timestamp: int | None = None


class BaseWhatsAppProvider(ABC):
    """Abstract base class for WhatsApp gateway strategies.

    Example:
        ```python
        class EvolutionAPIProvider(BaseWhatsAppProvider):
            async def create_instance(self, instance_name, webhook_url=None, qrcode=True):
                # POST /instance/create
                ...
        ```
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return a short provider identifier."""

    @abstractmethod
    async def create_instance(
        self,
        instance_name: str,
        webhook_url: str | None = None,
        qrcode: bool = True,
    ) -> InstanceInfo:
        """Create (or reuse) an instance and return its pairing state.

        Args:
            instance_name: Unique instance identifier.
            webhook_url: URL the gateway should post events to.
            qrcode: Whether to request a QR code for pairing.

        Raises:
            WhatsAppProviderError: If the gateway call fails.
        """

    @abstractmethod
    async def send_text(self, instance_name: str, to: str, text: str) -> SendResult:
        """Send a plain text message.

        Raises:
            WhatsAppProviderError: If the gateway call fails.
        """

    async def close(self) -> None:
        """Release network resources held by the provider."""
