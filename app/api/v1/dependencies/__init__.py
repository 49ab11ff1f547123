"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, never on infrastructure directly.
"""

from .auth import (
    get_current_user,
    get_token_verifier,
    log_activity,
    require_admin,
    require_authenticated,
    require_role,
)
from .db import get_cache, get_db, get_transaction_runner
from .services import (
    get_access_key_service,
    get_order_service,
    get_role_resolver,
    get_role_service,
)

__all__ = [
    "get_access_key_service",
    "get_cache",
    "get_current_user",
    "get_db",
    "get_order_service",
    "get_role_resolver",
    "get_role_service",
    "get_token_verifier",
    "get_transaction_runner",
    "log_activity",
    "require_admin",
    "require_authenticated",
    "require_role",
]
