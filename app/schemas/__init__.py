"""Pydantic request/response schemas for the API (camelCase on the wire)."""

from app.schemas.access_key import (
    AccessKeyBulkCreateRequest,
    AccessKeyBulkResponse,
    AccessKeyCreateRequest,
    AccessKeyResponse,
    CartSchema,
    RedeemRequest,
    RedeemResponse,
)
from app.schemas.common import ApiResponse, CamelModel, ErrorResponse
from app.schemas.health import HealthResponse
from app.schemas.order import CreateOrderRequest, OrderResponse
from app.schemas.role import GrantRoleRequest, GrantRoleResponse

__all__ = [
    "AccessKeyBulkCreateRequest",
    "AccessKeyBulkResponse",
    "AccessKeyCreateRequest",
    "AccessKeyResponse",
    "ApiResponse",
    "CamelModel",
    "CartSchema",
    "CreateOrderRequest",
    "ErrorResponse",
    "GrantRoleRequest",
    "GrantRoleResponse",
    "HealthResponse",
    "OrderResponse",
    "RedeemRequest",
    "RedeemResponse",
]
