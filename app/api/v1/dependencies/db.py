"""Firestore, transaction runner and cache dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.core.config import get_settings
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.exceptions import FirestoreNotConfiguredException
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.client import get_firestore_client
from app.infrastructure.firebase.transactions import TransactionRunner


def get_db() -> FirestoreRESTClient:
    """Firestore client initialized in the lifespan; 503 if not configured."""
    db = get_firestore_client()
    if db is None:
        raise FirestoreNotConfiguredException()
    return db


def get_transaction_runner(
    db: Annotated[FirestoreRESTClient, Depends(get_db)],
) -> TransactionRunner:
    """Transaction runner with retry settings from config."""
    settings = get_settings()
    return TransactionRunner(
        db,
        max_retries=settings.transaction_max_retries,
        base_delay_ms=settings.transaction_base_delay_ms,
    )


def get_cache(request: Request) -> CacheProtocol | None:
    """App-wide cache created in the lifespan (None before startup)."""
    return getattr(request.app.state, "cache", None)
