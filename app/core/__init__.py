"""Core configuration, retry policy and factory components."""

from app.core.config import Settings, get_settings
from app.core.factory import ComponentFactory
from app.core.retry import RetryPolicy, calculate_backoff, retry_async, with_retry

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "RetryPolicy",
    "calculate_backoff",
    "retry_async",
    "with_retry",
]
