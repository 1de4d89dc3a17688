"""
Client-side rate limiting.

A token bucket shared by every call made through one client. Waiting for
a token honours the caller's context, so a cancelled call stops waiting.
"""

import logging
import threading
import time

from hubspot_sdk.core.context import CallContext

logger = logging.getLogger(__name__)

# HubSpot private apps: 100 requests per 10 seconds
DEFAULT_MAX_REQUESTS = 100
DEFAULT_INTERVAL = 10.0


class RateLimiter:
    """Thread-safe token bucket: `max_requests` calls per `interval` seconds."""

    def __init__(self, max_requests: int = DEFAULT_MAX_REQUESTS, interval: float = DEFAULT_INTERVAL):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.max_requests = max_requests
        self.interval = interval
        self._rate = max_requests / interval
        self._tokens = float(max_requests)
        self._updated = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self, now: float) -> None:
        elapsed = now - self._updated
        if elapsed > 0:
            self._tokens = min(float(self.max_requests), self._tokens + elapsed * self._rate)
            self._updated = now

    def try_acquire(self) -> float:
        """
        Take a token if one is available.

        Returns:
            0.0 if a token was taken, otherwise seconds until one is available

        """
        with self._lock:
            self._refill(time.monotonic())
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return 0.0
            return (1.0 - self._tokens) / self._rate

    def acquire(self, ctx: CallContext | None = None) -> None:
        """
        Block until a token is available.

        Raises:
            CancelledError: If the context is cancelled while waiting
            DeadlineExceededError: If the deadline passes while waiting

        """
        ctx = ctx or CallContext.background()
        while True:
            ctx.raise_if_done()
            delay = self.try_acquire()
            if delay == 0.0:
                return
            logger.debug("Rate limit reached, waiting %.3fs for a token", delay)
            ctx.wait(delay)
