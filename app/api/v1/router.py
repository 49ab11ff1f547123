"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import access_keys, health, orders, roles

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(access_keys.router, prefix="/access-keys", tags=["access-keys"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
