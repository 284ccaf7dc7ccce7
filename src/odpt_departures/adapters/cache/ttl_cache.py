"""In-memory TTL cache implementation."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from odpt_departures.domain.contracts.ttl_cache import TtlCacheProtocol

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TtlCache(TtlCacheProtocol[V]):
    """Keyed in-memory store whose entries expire a fixed time after being written.

    Rebuilds are lazy and not deduplicated: two callers missing the same
    expired key both run the builder and the last write wins. A build that
    has started runs to completion and populates the cache even if the caller
    awaiting it is cancelled.
    """

    def __init__(
        self, name: str, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        """Initialize the cache.

        Args:
            name: Name of the store (for logging).
            ttl_seconds: Lifetime of each entry.
            clock: Monotonic clock, injectable for tests.
        """
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[V, float]] = {}
        self._builds: set[asyncio.Task[V]] = set()

    def get(self, key: str) -> V | None:
        """Get a live entry, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: V) -> None:
        """Store a value, resetting its expiry and dropping entries that have expired."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        self._entries[key] = (value, now + self.ttl_seconds)

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or every entry when no key is given."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    async def _build_and_store(self, key: str, build: Callable[[], Awaitable[V]]) -> V:
        value = await build()
        self.set(key, value)
        return value

    def _forget(self, task: asyncio.Task[V]) -> None:
        self._builds.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"{self.name}: rebuild failed: {task.exception()}")

    async def get_or_build(self, key: str, build: Callable[[], Awaitable[V]]) -> V:
        """Return the live entry for key, rebuilding it through build when needed.

        Exceptions raised by build propagate and are not cached.
        """
        value = self.get(key)
        if value is not None:
            return value

        logger.debug(f"{self.name}: miss for {key!r}, rebuilding")
        task = asyncio.ensure_future(self._build_and_store(key, build))
        self._builds.add(task)
        task.add_done_callback(self._forget)
        return await asyncio.shield(task)
