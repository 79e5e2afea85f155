"""Unit tests for the component factory."""

import asyncio

import pytest

from app.core.config import Settings
from app.core.factory import ComponentFactory
from app.strategies.whatsapp import EvolutionAPIProvider


def make_factory():
    return ComponentFactory(
        Settings(evolution_api_url="http://evolution.local", evolution_api_key="key")
    )


class TestWhatsAppProvider:
    def test_default_provider_is_cached(self):
        factory = make_factory()

        provider = factory.get_whatsapp_provider()

        assert isinstance(provider, EvolutionAPIProvider)
        assert provider.base_url == "http://evolution.local"
        assert factory.get_whatsapp_provider() is provider
        asyncio.run(factory.aclose())

    def test_explicit_type_reuses_cached_instance(self):
        factory = make_factory()
        default = factory.get_whatsapp_provider()

        explicit = factory.get_whatsapp_provider("evolution")

        assert explicit is default
        assert factory.get_whatsapp_provider() is default
        asyncio.run(factory.aclose())

    def test_aclose_closes_every_cached_provider(self):
        factory = make_factory()
        provider = factory.get_whatsapp_provider()
        factory.get_whatsapp_provider("evolution")

        asyncio.run(factory.aclose())

        assert provider._client.is_closed
        assert factory.get_whatsapp_provider() is not provider
        asyncio.run(factory.aclose())

    def test_unknown_type_raises(self):
        factory = make_factory()

        with pytest.raises(ValueError, match="Unknown WhatsApp provider type: twilio"):
            factory.get_whatsapp_provider("twilio")
