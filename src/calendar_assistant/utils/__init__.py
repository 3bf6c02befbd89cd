"""Utility functions for Calendar Assistant."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from calendar_assistant.exceptions import ConfigurationError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff and jitter.

    Attributes:
        max_attempts: Total number of attempts, including the first one.
        base_delay: Delay before the second attempt, in seconds.
        max_delay: Upper bound for a single delay, in seconds.
        jitter: Random extra delay as a fraction of the computed delay.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: float = 0.25

    def delay_for(self, attempt: int) -> float:
        """Return the delay to wait after the given zero-based failed attempt."""
        delay = min(self.max_delay, self.base_delay * (2**attempt))
        if self.jitter:
            delay += random.uniform(0.0, delay * self.jitter)
        return delay


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Await ``func`` and retry it on failure with exponential backoff.

    Args:
        func: Zero-argument coroutine factory to call on every attempt.
        policy: Retry policy to apply.
        retry_on: Exception types that are worth retrying. Anything else
            propagates immediately.
        sleep: Awaitable sleep function (injectable for tests).

    Returns:
        The result of the first successful attempt.

    Raises:
        The last exception once attempts are exhausted.
    """
    attempts = max(1, policy.max_attempts)
    for attempt in range(attempts):
        try:
            return await func()
        except retry_on as e:
            if attempt + 1 >= attempts:
                logger.error(
                    "function_retry_exhausted",
                    function=getattr(func, "__name__", repr(func)),
                    attempts=attempts,
                    error=str(e),
                )
                raise

            delay = policy.delay_for(attempt)
            logger.warning(
                "function_retry",
                function=getattr(func, "__name__", repr(func)),
                attempt=attempt + 1,
                max_attempts=attempts,
                delay=round(delay, 3),
                error=str(e),
            )
            await sleep(delay)

    raise AssertionError("unreachable")  # pragma: no cover


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name.

    Raises:
        ConfigurationError: If the name is not a known timezone.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {name!r}") from exc
