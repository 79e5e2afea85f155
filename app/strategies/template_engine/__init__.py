"""Template engine strategies.

Implements placeholder extraction and rendering for message templates.
"""

from app.strategies.template_engine.variables import extract_variables, render_template

__all__ = [
    "extract_variables",
    "render_template",
]
