"""Cache factory: build the configured backend for the app lifespan."""

import logging

from app.core.config import Settings
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.memory_cache import MemoryCache
from app.infrastructure.cache.redis_cache import CacheService

logger = logging.getLogger(__name__)


async def create_cache(settings: Settings) -> CacheProtocol:
    """Return a ready cache for ``settings.cache_backend`` ('memory' or 'redis')."""
    if settings.cache_backend == "redis":
        cache = CacheService(settings)
        await cache.connect()
        return cache
    logger.info("Using in-memory cache (max %d entries)", settings.cache_max_entries)
    return MemoryCache(
        max_entries=settings.cache_max_entries,
        default_ttl=settings.cache_ttl_roles,
    )
