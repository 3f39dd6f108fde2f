"""Client-side token bucket shared by every request of one client."""

import logging
import threading
import time
from typing import Callable, Optional

from .constants import DEFAULT_RATE_BURST, DEFAULT_RATE_INTERVAL
from .context import Context
from .exceptions import ConfigurationError, RateLimitCancelled

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Token bucket: one token every ``interval`` seconds, at most ``burst`` tokens.

    The bucket starts full. A caller that finds it empty reserves the next
    token (the count goes negative) and sleeps until that token is due, so
    waiters are served in arrival order and nobody is ever rejected.
    Invariant: tokens <= burst.
    """

    def __init__(
        self,
        interval: float = DEFAULT_RATE_INTERVAL,
        burst: int = DEFAULT_RATE_BURST,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval <= 0:
            raise ConfigurationError("rate interval must be positive")
        if burst <= 0:
            raise ConfigurationError("rate burst must be positive")

        self.interval = interval
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._tokens = float(burst)
        self._last_refill = clock()

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(float(self.burst), self._tokens + elapsed / self.interval)
        self._last_refill = now

    @property
    def tokens(self) -> float:
        with self._lock:
            self._refill(self._clock())
            return self._tokens

    def reserve(self) -> float:
        """Take one token and return how many seconds until it may be used."""
        with self._lock:
            self._refill(self._clock())
            self._tokens -= 1
            if self._tokens >= 0:
                return 0.0
            return -self._tokens * self.interval

    def _release(self) -> None:
        with self._lock:
            self._refill(self._clock())
            self._tokens = min(float(self.burst), self._tokens + 1)

    def acquire(self, context: Optional[Context] = None) -> float:
        """
        Block until a token is available.

        Args:
            context: Optional cancellation context

        Returns:
            Seconds spent waiting

        Raises:
            RateLimitCancelled: If the context ends before the token is due
        """
        if context is not None:
            context.raise_if_done(RateLimitCancelled)

        delay = self.reserve()
        if delay <= 0:
            return 0.0

        logger.debug("Rate limit reached, waiting %.3fs for a token", delay)

        if context is None:
            self._sleep(delay)
            return delay

        remaining = context.remaining()
        if remaining is not None and remaining < delay:
            self._release()
            raise RateLimitCancelled("rate limit wait would exceed context deadline")

        if context.wait(delay):
            self._release()
            raise RateLimitCancelled(context.reason() or "context cancelled")

        return delay
