"""Retry with exponential backoff for async operations.

Used around outbound HTTP calls (WhatsApp provider). The delay before retry
``k`` is ``base_delay * 2 ** (k - 1)`` capped at ``max_delay``; no jitter is
applied. The last error is re-raised unchanged once retries are exhausted.
"""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from app.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_DELAY = 30.0

# Attributes a LogRecord already owns; passing one in `extra` raises KeyError
_RESERVED_LOG_KEYS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


def _log_extra(context: dict[str, Any], **fields: Any) -> dict[str, Any]:
    """Merge caller context into log ``extra``, prefixing keys a LogRecord reserves."""
    extra = {
        (f"context_{key}" if key in _RESERVED_LOG_KEYS else key): value
        for key, value in context.items()
    }
    extra.update(fields)
    return extra


def calculate_backoff(
    attempt: int,
    base_delay: float,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> float:
    """Compute the wait before a retry.

    Args:
        attempt: 1-based retry number.
        base_delay: Delay in seconds for the first retry.
        max_delay: Upper bound in seconds.

    Returns:
        The delay in seconds, e.g. 1, 2, 4, 8, 16, 30, 30...
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    exponential_delay = base_delay * (2 ** (attempt - 1))
    return min(exponential_delay, max_delay)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget for an operation.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1).
        base_delay: Delay in seconds before the first retry.
        max_delay: Cap in seconds for any single delay.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = DEFAULT_MAX_DELAY

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_retries=settings.retry_max_retries,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )

    def delay_for(self, attempt: int) -> float:
        return calculate_backoff(attempt, self.base_delay, self.max_delay)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = DEFAULT_MAX_DELAY,
    should_retry: Callable[[Exception], bool] | None = None,
    context: dict[str, Any] | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the retry budget is spent.

    Every retried failure is logged at WARNING with the attempt number, the
    chosen delay and the error. When all attempts fail a single ERROR is
    logged and the last exception is re-raised as-is. Errors rejected by
    ``should_retry`` are re-raised immediately without logging a retry.

    Cancellation (``asyncio.CancelledError``) is not an ``Exception`` and
    propagates straight out of the attempt or the wait, so no further attempt
    is started.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt.
        max_retries: Retries after the first attempt.
        base_delay: Delay in seconds before the first retry.
        max_delay: Cap in seconds for any single delay.
        should_retry: Predicate deciding whether an error is retryable.
        context: Extra fields added to every log record (e.g. method, url).
            Keys clashing with LogRecord attributes get a ``context_`` prefix.
        sleep: Awaitable sleep, replaceable in tests.

    Returns:
        The result of the first successful attempt.
    """
    context = context or {}
    retry_count = 0

    while True:
        try:
            return await operation()
        except Exception as error:
            if should_retry is not None and not should_retry(error):
                raise

            if retry_count >= max_retries:
                logger.error(
                    f"All attempts failed after {max_retries} retries: {error}",
                    extra=_log_extra(context, max_retries=max_retries, error=str(error)),
                )
                raise

            retry_count += 1
            delay = calculate_backoff(retry_count, base_delay, max_delay)

            logger.warning(
                f"Retrying in {delay:.2f}s (attempt {retry_count}/{max_retries}): {error}",
                extra=_log_extra(
                    context,
                    attempt=retry_count,
                    max_retries=max_retries,
                    delay=delay,
                    error=str(error),
                ),
            )

            await sleep(delay)


def with_retry(
    policy: RetryPolicy | None = None,
    should_retry: Callable[[Exception], bool] | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorate an async function so each call goes through :func:`retry_async`.

    Example:
        ```python
        @with_retry(RetryPolicy(max_retries=5, base_delay=0.5))
        async def fetch_status(instance_name: str) -> dict:
            ...
        ```
    """
    policy = policy or RetryPolicy()

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_async(
                lambda: func(*args, **kwargs),
                max_retries=policy.max_retries,
                base_delay=policy.base_delay,
                max_delay=policy.max_delay,
                should_retry=should_retry,
                context={"operation": func.__qualname__},
            )

        return wrapper

    return decorator
