"""Protocol for time-to-live caches."""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

V = TypeVar("V")


class TtlCacheProtocol(Protocol[V]):
    """Protocol for a keyed store whose entries expire after a fixed TTL."""

    def get(self, key: str) -> V | None:
        """Get a live entry, or None if absent or expired."""
        ...

    def set(self, key: str, value: V) -> None:
        """Store a value, resetting its expiry."""
        ...

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or every entry when no key is given."""
        ...

    async def get_or_build(self, key: str, build: Callable[[], Awaitable[V]]) -> V:
        """Return the live entry for key, rebuilding it through build when needed."""
        ...
