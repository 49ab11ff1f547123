"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (Firestore client, role cache,
ID token verifier).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.cache import create_cache
from app.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from app.infrastructure.security import FirebaseTokenVerifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: Firestore client, cache, token verifier. Shutdown order:
    cache close, Firestore HTTP pool close. A Firestore initialization
    failure does not stop startup; requests that need the store then fail
    with SERVICE_UNAVAILABLE.
    """
    settings = get_settings()

    # ---- Startup ----
    if not init_firebase():
        logger.warning("Firestore is not configured; data endpoints will return 503")

    app.state.cache = await create_cache(settings)

    db = get_firestore_client()
    project_id = db.project_id if db is not None else settings.firebase_project_id
    if project_id:
        app.state.token_verifier = FirebaseTokenVerifier(project_id)
    else:
        app.state.token_verifier = None
        logger.warning("No Firebase project id; authenticated endpoints will return 503")

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.close()
        app.state.cache = None
        logger.info("Cache closed")

    await close_firebase()
