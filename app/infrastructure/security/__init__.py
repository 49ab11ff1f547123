"""Security: Firebase ID token verification."""

from app.infrastructure.security.firebase_auth import (
    FirebaseTokenVerifier,
    IdentityProviderUnavailableException,
)

__all__ = [
    "FirebaseTokenVerifier",
    "IdentityProviderUnavailableException",
]
