"""Cache key builders. Single place for key format.

Key components (uids etc.) must not contain CACHE_KEY_SEP to avoid
ambiguous or colliding keys.
"""

from app.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_ROLE


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator."""
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def role_key(uid: str) -> str:
    """Cache key for a user's resolved role."""
    _validate_key_component(uid, "uid")
    return f"{CACHE_PREFIX_ROLE}{CACHE_KEY_SEP}{uid}"
