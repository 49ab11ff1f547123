"""Cache protocol (DIP): the role lookup depends on this, not on a backend."""

from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Async key/value cache with per-entry TTL (memory or Redis)."""

    def is_available(self) -> bool:
        """Return True if the cache is usable."""
        ...

    async def get(self, key: str) -> Any:
        """Return cached value or None."""
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value with optional TTL in seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""
        ...

    async def close(self) -> None:
        """Release backend resources. Call on app shutdown."""
        ...
