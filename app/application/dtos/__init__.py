"""Application DTOs: commands and results passed between API and use cases."""

from app.application.dtos.access_key import (
    AccessKeyResult,
    BulkAccessKeysResult,
    Cart,
    CreateAccessKeyCommand,
    RedeemAccessKeyResult,
)
from app.application.dtos.order import CreateOrderCommand, OrderResult
from app.application.dtos.role import GrantRoleCommand, GrantRoleResult
from app.application.dtos.user import CurrentUser

__all__ = [
    "AccessKeyResult",
    "BulkAccessKeysResult",
    "Cart",
    "CreateAccessKeyCommand",
    "CreateOrderCommand",
    "CurrentUser",
    "GrantRoleCommand",
    "GrantRoleResult",
    "OrderResult",
    "RedeemAccessKeyResult",
]
