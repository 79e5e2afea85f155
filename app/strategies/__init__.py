"""Concrete strategy implementations."""

from app.strategies.template_engine import (
    extract_variables,
    render_template,
)
from app.strategies.whatsapp import (
    EvolutionAPIProvider,
)

__all__ = [
    "extract_variables",
    "render_template",
    "EvolutionAPIProvider",
]
