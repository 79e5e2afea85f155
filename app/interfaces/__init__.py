"""Abstract base classes for pluggable strategies."""

from app.interfaces.whatsapp_provider import (
    BaseWhatsAppProvider,
    InstanceInfo,
    SendResult,
    WhatsAppProviderError,
)

__all__ = [
    "BaseWhatsAppProvider",
    "InstanceInfo",
    "SendResult",
    "WhatsAppProviderError",
]
