"""
Coarse fixed-window request counter for the advice endpoint.

In-process only: the count resets on restart and is not shared between
workers. Check-and-increment happens under a lock so the ceiling holds even
when handlers run on a thread pool.
"""

import logging
import threading
import time
from typing import Callable, Optional

from health_advisor.config import settings

logger = logging.getLogger(__name__)


class RequestCounter:
    """Fixed-window counter: at most ``max_requests`` per ``window_seconds``."""

    def __init__(
        self,
        max_requests: Optional[int] = None,
        window_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = (
            max_requests if max_requests is not None else settings.rate_limit_max_requests
        )
        self.window_seconds = (
            window_seconds
            if window_seconds is not None
            else settings.rate_limit_window_seconds
        )
        self._clock = clock
        self._lock = threading.Lock()
        self.count = 0
        self.window_start = clock()

    def _reset_if_expired(self, now: float) -> None:
        if now - self.window_start > self.window_seconds:
            self.count = 0
            self.window_start = now

    def try_acquire(self) -> bool:
        """
        Count one request if the window has room.

        Returns:
            True if the request is admitted, False if the limit is reached
        """
        with self._lock:
            self._reset_if_expired(self._clock())
            if self.count >= self.max_requests:
                logger.warning(
                    "Rate limit reached: %d requests in current %ss window",
                    self.count,
                    self.window_seconds,
                )
                return False
            self.count += 1
            return True

    def reset(self) -> None:
        with self._lock:
            self.count = 0
            self.window_start = self._clock()


request_counter = RequestCounter()


def get_request_counter() -> RequestCounter:
    """FastAPI dependency returning the process-wide counter."""
    return request_counter
