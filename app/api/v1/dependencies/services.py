"""Use case and service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.application.services.role_resolver import RoleResolver
from app.application.use_cases.access_keys import AccessKeyService
from app.application.use_cases.orders import OrderService
from app.application.use_cases.roles import RoleService
from app.core.config import get_settings
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.transactions import TransactionRunner

from . import db as db_deps


def get_role_resolver(
    db: Annotated[FirestoreRESTClient, Depends(db_deps.get_db)],
    cache: Annotated[CacheProtocol | None, Depends(db_deps.get_cache)],
) -> RoleResolver:
    return RoleResolver(db, cache, ttl=get_settings().cache_ttl_roles)


def get_access_key_service(
    runner: Annotated[TransactionRunner, Depends(db_deps.get_transaction_runner)],
) -> AccessKeyService:
    """AccessKeyService with the configured key generation attempt limit."""
    settings = get_settings()
    return AccessKeyService(
        runner,
        max_attempts=settings.access_key_max_attempts,
        batch_max_operations=settings.batch_max_operations,
    )


def get_role_service(
    runner: Annotated[TransactionRunner, Depends(db_deps.get_transaction_runner)],
) -> RoleService:
    return RoleService(runner)


def get_order_service(
    runner: Annotated[TransactionRunner, Depends(db_deps.get_transaction_runner)],
) -> OrderService:
    return OrderService(runner)
