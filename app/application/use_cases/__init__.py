"""Application use cases: one entry point per workflow."""

from app.application.use_cases.access_keys import AccessKeyService
from app.application.use_cases.orders import OrderService
from app.application.use_cases.roles import RoleService

__all__ = [
    "AccessKeyService",
    "OrderService",
    "RoleService",
]
