"""Cache: in-memory and Redis backends behind CacheProtocol, plus key builders.

The app creates one cache in the lifespan (create_cache) and injects it into
request dependencies; nothing here is module-level state.
"""

from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.factory import create_cache
from app.infrastructure.cache.keys import role_key
from app.infrastructure.cache.memory_cache import MemoryCache
from app.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheProtocol",
    "CacheService",
    "MemoryCache",
    "create_cache",
    "role_key",
]
