"""Retry policy applied at the connection-acquisition boundary"""

import asyncio
import logging
import random
from dataclasses import dataclass
from functools import wraps
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from ddlsync.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with fixed (or exponential) backoff.

    The defaults reproduce the pool bootstrap behaviour of the admin scripts:
    three attempts, two seconds apart, no jitter.
    """

    max_attempts: int = 3
    initial_delay: float = 2.0
    max_delay: float = 60.0
    exponential_base: float = 1.0
    jitter: bool = False
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=max(1, settings.POOL_RETRY_ATTEMPTS),
            initial_delay=settings.POOL_RETRY_DELAY_SECONDS,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry that follows ``attempt`` (0-based)."""
        delay = min(self.initial_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay

    async def call(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Run ``func`` until it succeeds or the attempts are exhausted

        Raises:
            The last exception raised by ``func``
        """
        name = getattr(func, "__name__", repr(func))
        for attempt in range(self.max_attempts):
            try:
                return await func(*args, **kwargs)
            except self.exceptions as e:
                if attempt == self.max_attempts - 1:
                    logger.error(
                        f"All {self.max_attempts} attempts exhausted for {name}. "
                        f"Last error: {e}"
                    )
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    f"Attempt {attempt + 1}/{self.max_attempts} failed for {name}: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await asyncio.sleep(delay)

        raise RuntimeError("RetryPolicy.max_attempts must be at least 1")


def with_retry(policy: RetryPolicy):
    """Decorator form of :meth:`RetryPolicy.call`

    Example:
        @with_retry(RetryPolicy(max_attempts=3, initial_delay=2.0))
        async def create_pool():
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await policy.call(func, *args, **kwargs)

        return wrapper

    return decorator
