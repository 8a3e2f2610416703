"""Bounded retry for transport operations."""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from rootfetch.models.config import RetryPolicy


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
) -> T:
    """Run operation until it succeeds or policy.attempts is exhausted.

    Exceptions not listed in retry_on propagate immediately. After the last
    attempt the final exception is re-raised unchanged.
    """
    for attempt in range(1, policy.attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == policy.attempts:
                raise
            logger.warning(
                f"{description} failed (attempt {attempt}/{policy.attempts}): {e}"
            )
            if policy.delay:
                await asyncio.sleep(policy.delay)

    # attempts >= 1 is enforced by RetryPolicy
    raise AssertionError("unreachable")
