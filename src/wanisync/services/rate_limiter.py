"""Rolling window rate limiter implementation.

This module provides a thread-safe rate limiter that admits at most
``max_requests`` operations within any trailing window of
``window_seconds``. Every outbound WaniKani request passes through it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

from wanisync.shared.constants import WaniKaniAPI
from wanisync.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    create_cancelled_error,
)
from wanisync.shared.logging import log_operation_success

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Thread-safe rolling window rate limiter.

    The limiter keeps the timestamps of admitted acquisitions. An
    acquisition is admitted only while fewer than ``max_requests``
    timestamps fall inside the trailing window. Timestamps exactly on the
    window boundary still count, and waits are padded by
    ``SAFETY_MARGIN`` so clock skew never lets a request through early.

    Args:
        max_requests: Operations admitted per window (default: 60)
        window_seconds: Window length in seconds (default: 60)
        clock: Monotonic time source, injectable for tests
        sleep: Blocking sleep used when no cancel event is given
    """

    SAFETY_MARGIN = 0.05

    def __init__(
        self,
        max_requests: int = WaniKaniAPI.RATE_LIMIT_REQUESTS,
        window_seconds: float = WaniKaniAPI.RATE_LIMIT_WINDOW,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the rate limiter.

        Raises:
            ApplicationError: If max_requests or window_seconds are invalid
        """
        context = ErrorContext(
            operation="rate_limiter_init",
            additional_data={
                "max_requests": max_requests,
                "window_seconds": window_seconds,
            },
        )

        if max_requests <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"max_requests must be positive, got: {max_requests}",
                context=context,
            )

        if window_seconds <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"window_seconds must be positive, got: {window_seconds}",
                context=context,
            )

        self.max_requests = max_requests
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._sleep = sleep
        self._admitted: deque[float] = deque()
        self._lock = threading.Lock()

        log_operation_success(
            logger=logger,
            operation="rate_limiter_init",
            duration_ms=0,
            context=context,
        )

    def _prune(self, now: float) -> None:
        """Drop timestamps that left the window. Caller holds the lock."""
        cutoff = now - self.window_seconds
        while self._admitted and self._admitted[0] < cutoff:
            self._admitted.popleft()

    def _remaining(self, now: float) -> int:
        self._prune(now)
        return max(0, self.max_requests - len(self._admitted))

    def try_acquire(self) -> bool:
        """Acquire a slot if one is free right now.

        Returns:
            True if the slot was consumed, False if the window is full
        """
        with self._lock:
            now = self._clock()
            if self._remaining(now) > 0:
                self._admitted.append(now)
                return True
            return False

    def acquire(self, cancel_event: threading.Event | None = None) -> None:
        """Block until a slot is free, then consume it.

        Waiting sleeps until the oldest admitted timestamp leaves the
        window; it never spins.

        Args:
            cancel_event: Optional event; when it is set while waiting the
                call raises without consuming a slot

        Raises:
            OperationCancelledError: If ``cancel_event`` is set
        """
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise create_cancelled_error("rate_limiter_acquire")

            with self._lock:
                now = self._clock()
                if self._remaining(now) > 0:
                    self._admitted.append(now)
                    return
                delay = self._admitted[0] + self.window_seconds - now + self.SAFETY_MARGIN

            logger.debug("Rate limit window full, waiting %.2fs", delay)
            if cancel_event is None:
                self._sleep(delay)
            elif cancel_event.wait(delay):
                raise create_cancelled_error("rate_limiter_acquire")

    def reconcile(self, server_remaining: int) -> None:
        """Align the local budget with the server's reported remaining count.

        If the server reports fewer remaining requests than the local
        window allows, the window is padded with the current time until
        both agree. A larger server figure is ignored.

        Args:
            server_remaining: Value of the ``RateLimit-Remaining`` header
        """
        with self._lock:
            now = self._clock()
            deficit = self._remaining(now) - max(0, server_remaining)
            for _ in range(deficit):
                self._admitted.append(now)

        if deficit > 0:
            logger.debug(
                "Server reports %d requests remaining, reduced local budget by %d",
                server_remaining,
                deficit,
            )

    def remaining(self) -> int:
        """Get the number of acquisitions currently admissible without waiting."""
        with self._lock:
            return self._remaining(self._clock())

    def reset(self) -> None:
        """Forget every admitted acquisition."""
        with self._lock:
            self._admitted.clear()
