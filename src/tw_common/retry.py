"""Bounded retry for optimistic-concurrency conflicts.

Each attempt must be a complete unit of work that has already rolled back
on failure; the loop only re-runs it.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from src.tw_common.errors import TransientConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_BACKOFF_SECONDS = 1.0


async def retry_on_conflict(
    attempt: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    backoff_seconds: float,
    label: str,
) -> T:
    """Run `attempt` until it succeeds or `max_attempts` conflicts happened.

    Only TransientConflictError is retried; every other error propagates on
    the first occurrence. The last conflict is re-raised unchanged.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    for n in range(1, max_attempts + 1):
        try:
            return await attempt()
        except TransientConflictError:
            if n == max_attempts:
                logger.error("%s: giving up after %d conflicting attempts", label, n)
                raise
            logger.warning("%s: conflict on attempt %d/%d, retrying", label, n, max_attempts)
            if backoff_seconds > 0:
                # Exponential backoff with a hard cap
                await asyncio.sleep(min(backoff_seconds * (2 ** (n - 1)), MAX_BACKOFF_SECONDS))

    raise AssertionError("unreachable")  # pragma: no cover
