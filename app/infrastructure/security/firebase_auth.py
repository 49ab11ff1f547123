"""Firebase ID token verification (google-auth, no firebase-admin).

verify_firebase_token checks signature, expiry, issuer and audience against
Google's published certificates. It is blocking, so it runs in a worker
thread. Revocation and disabled-account checks need the Admin SDK and are
not performed.
"""

import asyncio
import logging
from typing import Any

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from app.application.dtos.user import CurrentUser
from app.domain.exceptions import AuthenticationException, ELearningException

logger = logging.getLogger(__name__)


class IdentityProviderUnavailableException(ELearningException):
    """Raised when the token signing certificates cannot be fetched."""

    def __init__(self) -> None:
        super().__init__(
            "Identity provider is unreachable", "SERVICE_UNAVAILABLE"
        )


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens for one project."""

    def __init__(self, project_id: str, request: Any = None) -> None:
        """Initialize the verifier.

        Args:
            project_id: Expected token audience (Firebase project id).
            request: google-auth transport Request used to fetch certificates.
        """
        self.project_id = project_id
        self._request = request if request is not None else google_requests.Request()

    def _verify_sync(self, token: str) -> dict[str, Any]:
        return id_token.verify_firebase_token(
            token, self._request, audience=self.project_id
        )

    async def verify(self, token: str) -> CurrentUser:
        """Return the caller identity for a valid token.

        Raises:
            AuthenticationException: Token malformed, expired or for another project.
            IdentityProviderUnavailableException: Certificates could not be fetched.
        """
        try:
            claims = await asyncio.to_thread(self._verify_sync, token)
        except google_auth_exceptions.TransportError as e:
            logger.error("Fetching Firebase token certificates failed: %s", e)
            raise IdentityProviderUnavailableException() from e
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            logger.info("Rejected ID token: %s", e)
            raise AuthenticationException("Invalid or expired token") from e

        uid = (claims or {}).get("user_id") or (claims or {}).get("sub")
        if not uid:
            raise AuthenticationException("Token has no subject")
        return CurrentUser(
            uid=uid,
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
        )
