"""In-process cache with per-entry TTL and a bounded entry count.

One instance per app (created in the lifespan), never module-level state, so
tests build isolated caches. Expired entries are dropped lazily; when full,
the oldest inserted entry is evicted.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100
DEFAULT_TTL_SECONDS = 300


class MemoryCache:
    """TTL- and size-bounded dict cache implementing CacheProtocol."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Capacity; inserting beyond it evicts the oldest entry.
            default_ttl: TTL in seconds used when set() gets none.
            clock: Monotonic time source in seconds (injectable for tests).
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[str, tuple[Any, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Cache MISS: %s", key)
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            logger.debug("Cache EXPIRED: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        now = self._clock()
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_entries:
            self._purge_expired(now)
        while len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache EVICT: %s", evicted)
        self._entries[key] = (value, now + (ttl if ttl is not None else self.default_ttl))
        return True

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def close(self) -> None:
        self._entries.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
