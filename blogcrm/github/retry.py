"""Retry helper with linear backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    delay: float = 1.0,
    should_retry: Callable[[Exception], bool] | None = None,
) -> T:
    """Await ``fn()`` up to ``max_attempts`` times.

    Attempt N that fails waits ``delay * N`` seconds before the next one
    (1s, 2s, ... with the default delay). The last error is re-raised. When
    ``should_retry`` returns False for an error it is raised immediately.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except Exception as exc:
            if attempt == max_attempts:
                raise
            if should_retry is not None and not should_retry(exc):
                raise
            wait = delay * attempt
            logger.debug(
                "attempt %d/%d failed (%s); retrying in %.1fs",
                attempt, max_attempts, exc, wait,
            )
            await asyncio.sleep(wait)

    raise AssertionError("unreachable")
