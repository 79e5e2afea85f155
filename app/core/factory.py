"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from app.core.config import Settings, get_settings
from app.core.retry import RetryPolicy
from app.interfaces.whatsapp_provider import BaseWhatsAppProvider
from app.strategies.whatsapp import EvolutionAPIProvider

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        provider = factory.get_whatsapp_provider()
        info = await provider.create_instance("user_1_whatsapp")
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._whatsapp_providers: dict[str, BaseWhatsAppProvider] = {}

    def get_retry_policy(self) -> RetryPolicy:
        """Build the outbound-call retry policy from settings."""
        return RetryPolicy.from_settings(self._settings)

    def get_whatsapp_provider(self, provider_type: str | None = None) -> BaseWhatsAppProvider:
        """Get a WhatsApp provider instance based on the specified type.

        Args:
            provider_type: The provider type to instantiate. If None, uses settings.

        Returns:
            A BaseWhatsAppProvider implementation instance.

        Raises:
            ValueError: If the provider type is unknown.
        """
        provider_type = provider_type or self._settings.whatsapp_provider_type

        # One cached instance per type; an explicit type never replaces another
        if provider_type not in self._whatsapp_providers:
            logger.info(f"Instantiating WhatsApp provider: {provider_type}")

            match provider_type:
                case "evolution":
                    self._whatsapp_providers[provider_type] = EvolutionAPIProvider(
                        base_url=self._settings.evolution_api_url,
                        api_key=self._settings.evolution_api_key,
                        timeout=self._settings.http_timeout,
                        retry_policy=self.get_retry_policy(),
                    )
                case _:
                    raise ValueError(
                        f"Unknown WhatsApp provider type: {provider_type}. "
                        f"Valid options: 'evolution'"
                    )

        return self._whatsapp_providers[provider_type]

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._whatsapp_providers = {}
        logger.debug("Component factory cache cleared")

    async def aclose(self) -> None:
        """Close cached components holding network resources, then clear the cache."""
        for provider in self._whatsapp_providers.values():
            await provider.close()
        self.clear_cache()


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
