"""
Cancellation context for outbound requests.

A Context is shared between the caller and the request it issues. The
caller may cancel it at any time, or give it a deadline up front.
"""

import threading
import time
from typing import Callable, Optional

from .exceptions import RequestCancelled


class Context:
    """
    Cancellation signal with an optional deadline.

    Usage:
        ctx = Context.with_timeout(5)
        client.do(request, context=ctx)

        # from another thread
        ctx.cancel()
    """

    def __init__(self, deadline: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._event = threading.Event()
        self._clock = clock
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float, clock: Callable[[], float] = time.monotonic) -> "Context":
        """Create a context that expires ``seconds`` from now."""
        return cls(deadline=clock() + seconds, clock=clock)

    def cancel(self):
        """Cancel the context; waiters wake up immediately."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def done(self) -> bool:
        """True once cancelled or past the deadline."""
        if self._event.is_set():
            return True
        return self.deadline is not None and self._clock() >= self.deadline

    def reason(self) -> Optional[str]:
        if self._event.is_set():
            return "context cancelled"
        if self.done():
            return "context deadline exceeded"
        return None

    def raise_if_done(self, exc_class=RequestCancelled):
        reason = self.reason()
        if reason is not None:
            raise exc_class(reason)

    def wait(self, timeout: float) -> bool:
        """
        Block for up to ``timeout`` seconds.

        Returns:
            True if the context ended before the timeout elapsed
        """
        remaining = self.remaining()
        if remaining is not None and remaining < timeout:
            # deadline comes first
            self._event.wait(remaining)
            return True
        return self._event.wait(timeout)
