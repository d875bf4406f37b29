"""
Token-bucket rate limiter for outbound explorer requests.

Callers wait until a token is available; nothing is ever dropped or
rejected. Waiters are served in the order they arrived.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

import structlog

from chainpay.errors import ConfigurationError

logger = structlog.get_logger()


class RateLimiter:
    """
    Token bucket bounding the request rate.

    The bucket holds up to ``rate`` tokens and refills at ``rate`` tokens
    per second, so a burst of ``rate`` calls passes immediately and the
    sustained rate never exceeds ``rate`` per second.
    """

    def __init__(
        self,
        rate: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the limiter.

        Args:
            rate: Requests allowed per second
            clock: Monotonic time source
            sleep: Coroutine used to wait for the next token
        """
        if rate <= 0:
            raise ConfigurationError("Rate limit must be greater than 0")

        self.rate = float(rate)
        self.capacity = float(rate)
        self._clock = clock
        self._sleep = sleep
        self._tokens = self.capacity
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
            self._last_refill = now

    async def acquire(self) -> None:
        """Wait until a token is available and consume it."""
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                delay = (1 - self._tokens) / self.rate
                logger.debug("rate_limiter.waiting", delay_seconds=round(delay, 4))
                await self._sleep(delay)
                self._refill()
            self._tokens -= 1

    @property
    def available_tokens(self) -> float:
        self._refill()
        return self._tokens
