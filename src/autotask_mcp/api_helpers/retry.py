"""Retry helper for transient Autotask transport failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import aiohttp

T = TypeVar("T")

logger = logging.getLogger(__name__)


def is_transient_error(error: Exception) -> bool:
    """Return True for failures worth retrying.

    Connection resets, timeouts and aiohttp connection/payload errors are
    transient. HTTP status errors are not: the client handles 429 itself and
    every other status is final.
    """
    transient_types = (
        asyncio.TimeoutError,
        TimeoutError,
        ConnectionError,
        aiohttp.ClientConnectionError,
        aiohttp.ClientPayloadError,
    )
    return isinstance(error, transient_types)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    retry_delay: float = 1.0,
    is_transient: Callable[[Exception], bool] = is_transient_error,
    description: str = "request",
) -> T:
    """Run ``operation`` and retry transient failures with exponential backoff.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt.
        max_retries: Retries after the first attempt.
        retry_delay: Delay before the first retry; doubles on each retry.
        is_transient: Predicate selecting retryable exceptions.
        description: Label used in log messages.

    Returns:
        The result of the first successful attempt.

    Raises:
        ValueError: If ``max_retries`` or ``retry_delay`` is negative.
        Exception: The last error once retries are exhausted, or the first
            non-transient error.
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")  # noqa: TRY003
    if retry_delay < 0:
        raise ValueError("retry_delay must be >= 0")  # noqa: TRY003

    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            attempt += 1
            if not is_transient(e) or attempt > max_retries:
                raise

            delay = retry_delay * (2 ** (attempt - 1))
            logger.warning(
                "Transient error on %s (attempt %d/%d): %s. Retrying in %.1fs",
                description,
                attempt,
                max_retries + 1,
                e,
                delay,
            )
            await asyncio.sleep(delay)
