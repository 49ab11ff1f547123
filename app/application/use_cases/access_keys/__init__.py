"""Access key use cases."""

from app.application.use_cases.access_keys.access_key_operations import (
    AccessKeyService,
    normalize_access_key,
)

__all__ = ["AccessKeyService", "normalize_access_key"]
