"""Redis-backed cache for deployments running more than one worker.

Values are stored as JSON with a TTL. Every failure degrades to a cache miss:
the role lookup then falls back to Firestore, so Redis being down never fails
a request.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis

from app.core.config import Settings

logger = logging.getLogger(__name__)


class CacheService:
    """Async Redis cache implementing CacheProtocol.

    Call connect() at startup and close() at shutdown.
    """

    def __init__(
        self,
        settings: Settings,
        redis_client: redis.Redis | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            settings: Connection settings and default TTL.
            redis_client: Optional Redis client for testing or DI.
        """
        self.settings = settings
        self.redis = redis_client
        self.default_ttl = settings.cache_ttl_roles
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection; on failure the cache stays disabled."""
        if self.redis is not None:
            return
        client = redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=self.settings.redis_password.get_secret_value()
            if self.settings.redis_password
            else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )
        try:
            await client.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Cache disabled.", e)
            await client.aclose()
            return
        self.redis = client
        self._connected = True
        logger.info(
            "Redis cache connected: %s:%s",
            self.settings.redis_host,
            self.settings.redis_port,
        )

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    async def get(self, key: str) -> Any | None:
        """Return the JSON-decoded value, or None if missing or unavailable."""
        if not self.is_available():
            return None
        try:
            value = await self.redis.get(key)
        except redis.RedisError:
            logger.warning("Cache get failed for key %s", key, exc_info=True)
            return None
        if value is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return json.loads(value)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store a JSON-serializable value; returns True on success."""
        if not self.is_available():
            return False
        try:
            await self.redis.setex(
                key,
                ttl if ttl is not None else self.default_ttl,
                json.dumps(value, default=str),
            )
            return True
        except redis.RedisError:
            logger.warning("Cache set failed for key %s", key, exc_info=True)
            return False

    async def delete(self, key: str) -> bool:
        if not self.is_available():
            return False
        try:
            return bool(await self.redis.delete(key))
        except redis.RedisError:
            logger.warning("Cache delete failed for key %s", key, exc_info=True)
            return False
