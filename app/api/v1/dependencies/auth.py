"""Request pipeline: authenticate -> require role -> log activity.

Each step is a FastAPI dependency that either returns or raises, so a
failing step ends the request before later steps run. Routes declare the
steps in that order.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.dtos.user import CurrentUser
from app.application.services.role_resolver import RoleResolver
from app.domain.enums import ActivityAction, UserRole
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase._rest_encoding import SERVER_TIMESTAMP
from app.infrastructure.firebase.collections import COLLECTION_USER_ACTIVITY
from app.infrastructure.security.firebase_auth import (
    FirebaseTokenVerifier,
    IdentityProviderUnavailableException,
)
from app.shared.telemetry.logging import get_logger

from . import db as db_deps
from . import services

logger = get_logger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


def get_token_verifier(request: Request) -> FirebaseTokenVerifier:
    """Token verifier created in the lifespan."""
    verifier = getattr(request.app.state, "token_verifier", None)
    if verifier is None:
        raise IdentityProviderUnavailableException()
    return verifier


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    verifier: Annotated[FirebaseTokenVerifier, Depends(get_token_verifier)],
) -> CurrentUser:
    """Return the verified caller; 401 if the bearer token is missing or invalid."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Missing bearer token")
    return await verifier.verify(credentials.credentials)


def require_role(*roles: UserRole) -> Callable[..., Awaitable[CurrentUser]]:
    """Dependency factory: authenticated caller whose current role is in ``roles``."""
    allowed = sorted({UserRole(r).value for r in roles})

    async def _require(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        resolver: Annotated[RoleResolver, Depends(services.get_role_resolver)],
    ) -> CurrentUser:
        role = await resolver.resolve(current_user.uid)
        if role not in allowed:
            logger.warning(
                "Insufficient role for %s: has %s, needs one of %s",
                current_user.uid,
                role,
                allowed,
            )
            raise AuthorizationException(
                f"Requires role: {' or '.join(allowed)}", required_roles=allowed
            )
        return current_user.with_role(role)

    return _require


require_admin = require_role(UserRole.ADMIN)
require_authenticated = require_role(UserRole.STUDENT, UserRole.TEACHER, UserRole.ADMIN)


def log_activity(action: ActivityAction) -> Callable[..., Awaitable[None]]:
    """Dependency factory: best-effort userActivity row for the caller.

    A failed write is logged and never fails the request.
    """

    async def _log(
        request: Request,
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        db: Annotated[FirestoreRESTClient, Depends(db_deps.get_db)],
    ) -> None:
        try:
            await db.collection(COLLECTION_USER_ACTIVITY).document().set(
                {
                    "uid": current_user.uid,
                    "action": action.value,
                    "method": request.method,
                    "url": request.url.path,
                    "userAgent": request.headers.get("user-agent"),
                    "ip": request.client.host if request.client else None,
                    "timestamp": SERVER_TIMESTAMP,
                }
            )
        except Exception:
            logger.warning(
                "Activity log write failed for %s (%s)",
                current_user.uid,
                action.value,
                exc_info=True,
            )

    return _log
