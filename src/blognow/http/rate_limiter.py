"""Rate limiter for controlling request frequency.

Provides a ticker-driven FIFO rate limiter: callers queue up in
``acquire()`` and a background task releases one waiter per tick.

Example:
    >>> from blognow.http import RateLimiter
    >>>
    >>> limiter = RateLimiter(rate=10.0)  # one release every 100ms
    >>>
    >>> # In async code
    >>> await limiter.acquire()  # Waits for the next tick
    >>> # ... make request ...
    >>> limiter.shutdown()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque

from blognow.errors import configuration_error

logger = logging.getLogger("blognow.http.rate_limiter")


class RateLimiter:
    """Ticker-driven FIFO rate limiter.

    Waiters are released strictly in arrival order, at most one per tick,
    where a tick is ``1 / rate`` seconds. The ticker task starts on the
    first ``acquire()`` so the limiter can be built outside a running loop.

    ``shutdown()`` drops queued waiters without releasing them. A caller
    still suspended in ``acquire()`` at that point stays suspended until
    it is cancelled by its owner.

    Example:
        >>> import asyncio
        >>> limiter = RateLimiter(rate=100.0)
        >>>
        >>> async def make_requests():
        ...     for i in range(10):
        ...         await limiter.acquire()
        ...         # ... make request ...
        ...     limiter.shutdown()
        >>>
        >>> asyncio.run(make_requests())

    Attributes:
        rate: Maximum releases per second
        interval: Seconds between ticks
    """

    def __init__(self, rate: float = 10.0):
        """Initialize rate limiter.

        Args:
            rate: Maximum requests per second (default: 10)

        Raises:
            BlogNowError: CONFIGURATION_ERROR if rate is not positive
        """
        if rate <= 0:
            raise configuration_error("Rate limit must be a positive number")
        self.rate = rate
        self.interval = 1.0 / rate
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._ticker: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of waiters still queued."""
        return sum(1 for w in self._waiters if not w.done())

    @property
    def is_running(self) -> bool:
        """Whether the ticker task is alive."""
        return self._ticker is not None and not self._ticker.done()

    @property
    def closed(self) -> bool:
        """Whether shutdown() has been called."""
        return self._closed

    async def acquire(self) -> None:
        """Wait in line until the ticker releases this caller.

        Raises:
            BlogNowError: CONFIGURATION_ERROR if the limiter was shut down
        """
        if self._closed:
            raise configuration_error("Client has been closed")

        loop = asyncio.get_running_loop()
        self._ensure_ticker(loop)

        waiter: asyncio.Future[None] = loop.create_future()
        self._waiters.append(waiter)
        await waiter

    def _ensure_ticker(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._ticker is not None and not self._ticker.done():
            if self._ticker.get_loop() is loop:
                return
            # Bound to a loop that is no longer ours; its waiters are unreachable.
            with contextlib.suppress(RuntimeError):
                self._ticker.cancel()
            self._waiters.clear()
        self._ticker = loop.create_task(self._tick(), name="blognow-rate-limiter")

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            # Cancelled waiters do not consume a tick.
            while self._waiters:
                waiter = self._waiters.popleft()
                if not waiter.done():
                    waiter.set_result(None)
                    break

    def shutdown(self) -> None:
        """Stop the ticker and discard queued waiters. Idempotent."""
        if self._ticker is not None:
            # The owning loop may already be closed.
            with contextlib.suppress(RuntimeError):
                self._ticker.cancel()
            self._ticker = None
        if self._waiters:
            logger.debug(f"Discarding {len(self._waiters)} queued rate limiter waiters")
        self._waiters.clear()
        self._closed = True

    async def aclose(self) -> None:
        """Shut down and wait for the ticker task to finish."""
        ticker = self._ticker
        self.shutdown()
        if ticker is not None and ticker.get_loop() is asyncio.get_running_loop():
            with contextlib.suppress(asyncio.CancelledError):
                await ticker


__all__ = [
    "RateLimiter",
]
