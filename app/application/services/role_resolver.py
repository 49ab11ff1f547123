"""Caller role lookup with a TTL cache in front of users/{uid}.role."""

from app.domain.enums import UserRole
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.keys import role_key
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.collections import COLLECTION_USERS
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RoleResolver:
    """Resolve a uid's role: cache, then the user document, default student.

    Roles are derived data; the cache only bounds how stale a role check can
    be (``ttl`` seconds). grant-role invalidates the target's entry.
    """

    def __init__(
        self,
        db: FirestoreRESTClient,
        cache: CacheProtocol | None = None,
        ttl: int = 300,
    ) -> None:
        self.db = db
        self.cache = cache
        self.ttl = ttl

    async def resolve(self, uid: str) -> str:
        key = role_key(uid)
        if self.cache is not None and self.cache.is_available():
            cached = await self.cache.get(key)
            if cached is not None:
                return cached

        snap = await self.db.collection(COLLECTION_USERS).document(uid).get()
        role = (snap.to_dict().get("role") if snap is not None else None) or UserRole.STUDENT.value
        if snap is None:
            logger.info("No user profile for %s; treating as %s", uid, role)

        if self.cache is not None and self.cache.is_available():
            await self.cache.set(key, role, ttl=self.ttl)
        return role

    async def invalidate(self, uid: str) -> None:
        if self.cache is not None:
            await self.cache.delete(role_key(uid))
