"""WhatsApp gateway strategies."""

from app.strategies.whatsapp.evolution import EvolutionAPIProvider, format_phone_number

__all__ = [
    "EvolutionAPIProvider",
    "format_phone_number",
]
