"""Throttle for outgoing API requests.

Single choke point for upstream rate limiting: spaces requests by a minimum
delay and lets a throttled caller pause every other caller while it backs off.
"""

from __future__ import annotations

import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class RequestThrottle:
    """Throttle for outgoing API requests.

    Ensures a minimum delay between requests to one API and serializes
    back-off pauses. Async-safe using asyncio.Lock.
    """

    def __init__(self, api_name: str, min_delay_seconds: float = 0.0) -> None:
        """Initialize the throttle.

        Args:
            api_name: Name of the API (for logging).
            min_delay_seconds: Minimum delay between requests in seconds.
        """
        self.api_name = api_name
        self.min_delay_seconds = min_delay_seconds
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Acquire permission to make a request.

        Blocks until enough time has passed since the last request and until
        any back-off pause in progress has finished.
        """
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            wait_time = self.min_delay_seconds - elapsed

            if wait_time > 0:
                logger.debug(f"{self.api_name}: waiting {wait_time:.2f}s before next request")
                await asyncio.sleep(wait_time)

            self._last_request_time = time.monotonic()

    async def back_off(self, delay_seconds: float) -> None:
        """Pause all requests to this API for the given delay.

        Holds the lock while sleeping, so concurrent callers queue behind it.
        """
        async with self._lock:
            logger.info(f"{self.api_name}: throttled upstream, backing off {delay_seconds:.2f}s")
            await asyncio.sleep(delay_seconds)
            self._last_request_time = time.monotonic()

    async def __aenter__(self) -> RequestThrottle:
        """Context manager entry - acquire a request slot."""
        await self.acquire()
        return self

    async def __aexit__(
        self, _exc_type: type | None, _exc_val: Exception | None, _exc_tb: object
    ) -> None:
        """Context manager exit - nothing to do."""
