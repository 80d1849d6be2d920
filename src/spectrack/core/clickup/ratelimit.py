"""
Minimum-spacing gate for outgoing API calls.

Every request a client makes passes through one RateLimiter. The limiter
blocks the caller until ``min_interval`` seconds have passed since the
previous call started; it never drops or reorders calls.

The lock is held across the wait, so concurrent callers queue up and each
one still observes the full spacing from the call before it.

Example:
    >>> limiter = RateLimiter(min_interval=0.2)
    >>> limiter.wait()  # returns immediately
    >>> limiter.wait()  # blocks ~0.2s
"""

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Serializing pacing gate.

    Attributes:
        min_interval: Minimum seconds between the start of two calls
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            min_interval: Minimum spacing in seconds (0 disables pacing)
            clock: Monotonic clock, injectable for tests
            sleep: Sleep function, injectable for tests

        Raises:
            ValueError: If min_interval is negative
        """
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: float | None = None

    def wait(self) -> float:
        """
        Block until the next call may start, then claim the slot.

        Returns:
            Seconds spent waiting
        """
        with self._lock:
            waited = 0.0
            if self._last_call is not None:
                elapsed = self._clock() - self._last_call
                remaining = self.min_interval - elapsed
                if remaining > 0:
                    logger.debug(f"Rate limit: waiting {remaining:.3f}s")
                    self._sleep(remaining)
                    waited = remaining
            self._last_call = self._clock()
            return waited

    def reset(self) -> None:
        with self._lock:
            self._last_call = None
