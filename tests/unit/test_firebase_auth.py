"""FirebaseTokenVerifier: claims mapping and failure classification."""

import pytest
from google.auth import exceptions as google_auth_exceptions

from app.domain.exceptions import AuthenticationException
from app.infrastructure.security import firebase_auth
from app.infrastructure.security.firebase_auth import (
    FirebaseTokenVerifier,
    IdentityProviderUnavailableException,
)


@pytest.fixture
def verifier() -> FirebaseTokenVerifier:
    return FirebaseTokenVerifier("test-project", request=object())


async def test_valid_token_returns_current_user(verifier, monkeypatch) -> None:
    seen = {}

    def fake_verify(token, request, audience=None):
        seen.update(token=token, audience=audience)
        return {"user_id": "u1", "email": "u1@example.com", "email_verified": True}

    monkeypatch.setattr(firebase_auth.id_token, "verify_firebase_token", fake_verify)

    user = await verifier.verify("good-token")

    assert seen == {"token": "good-token", "audience": "test-project"}
    assert user.uid == "u1"
    assert user.email == "u1@example.com"
    assert user.email_verified is True
    assert user.role is None


async def test_sub_claim_used_when_user_id_missing(verifier, monkeypatch) -> None:
    monkeypatch.setattr(
        firebase_auth.id_token,
        "verify_firebase_token",
        lambda token, request, audience=None: {"sub": "u2"},
    )
    assert (await verifier.verify("t")).uid == "u2"


@pytest.mark.parametrize(
    "error",
    [ValueError("Token expired"), google_auth_exceptions.InvalidValue("bad signature")],
)
async def test_invalid_token_raises_authentication_error(verifier, monkeypatch, error) -> None:
    def fake_verify(token, request, audience=None):
        raise error

    monkeypatch.setattr(firebase_auth.id_token, "verify_firebase_token", fake_verify)

    with pytest.raises(AuthenticationException) as exc_info:
        await verifier.verify("bad")
    assert exc_info.value.message == "Invalid or expired token"
    assert "expired" not in str(exc_info.value.details)


async def test_certificate_fetch_failure_is_unavailable(verifier, monkeypatch) -> None:
    def fake_verify(token, request, audience=None):
        raise google_auth_exceptions.TransportError("certs unreachable")

    monkeypatch.setattr(firebase_auth.id_token, "verify_firebase_token", fake_verify)

    with pytest.raises(IdentityProviderUnavailableException) as exc_info:
        await verifier.verify("t")
    assert exc_info.value.error_code == "SERVICE_UNAVAILABLE"


async def test_token_without_subject_rejected(verifier, monkeypatch) -> None:
    monkeypatch.setattr(
        firebase_auth.id_token,
        "verify_firebase_token",
        lambda token, request, audience=None: {"email": "x@example.com"},
    )
    with pytest.raises(AuthenticationException):
        await verifier.verify("t")
