"""Error normalizer: stable codes, localized messages, no leaked internals."""

import pytest

from app.application.services.error_normalizer import (
    MESSAGES,
    UNKNOWN_ERROR,
    classify,
    error_code_of,
    message_for,
)
from app.domain.exceptions import (
    KeyAlreadyUsedException,
    KeyGenerationExhaustedException,
    ValidationException,
)
from app.infrastructure.exceptions import DocumentExistsError, FirestoreException

STORE_CODES = [
    "PERMISSION_DENIED",
    "NOT_FOUND",
    "ALREADY_EXISTS",
    "RESOURCE_EXHAUSTED",
    "FAILED_PRECONDITION",
    "ABORTED",
    "OUT_OF_RANGE",
    "UNIMPLEMENTED",
    "INTERNAL",
    "UNAVAILABLE",
    "DATA_LOSS",
    "UNAUTHENTICATED",
]


@pytest.mark.parametrize("code", STORE_CODES)
def test_store_codes_have_messages_in_every_locale(code: str) -> None:
    error = FirestoreException(code, "projects/p/databases/(default) internal detail")
    for locale in MESSAGES:
        normalized = classify(error, locale=locale)
        assert normalized.code == code
        assert normalized.user_message == MESSAGES[locale][code]
        assert "projects/p" not in normalized.user_message
        assert normalized.details is None


def test_every_locale_covers_the_same_codes() -> None:
    assert set(MESSAGES["en"]) == set(MESSAGES["vi"])


def test_domain_error_uses_catalog_message() -> None:
    normalized = classify(KeyAlreadyUsedException("ABCD-EFGH-IJKL", "redeemed"))
    assert normalized.code == "KEY_ALREADY_USED"
    assert normalized.user_message == "This access key has already been used"
    assert "ABCD" not in normalized.user_message


def test_validation_message_passes_through_in_english_only() -> None:
    error = ValidationException("count must be between 1 and 400", field="count")
    assert classify(error).user_message == "count must be between 1 and 400"
    assert classify(error, locale="vi").user_message == MESSAGES["vi"]["VALIDATION_ERROR"]


def test_unmapped_errors_fall_back_to_generic_message() -> None:
    for error in (RuntimeError("db password=secret"), FirestoreException("WEIRD", "x")):
        normalized = classify(error)
        assert normalized.code == UNKNOWN_ERROR
        assert normalized.user_message == MESSAGES["en"][UNKNOWN_ERROR]
        assert normalized.details is None


def test_debug_mode_exposes_details() -> None:
    normalized = classify(KeyGenerationExhaustedException(5), debug=True)
    assert normalized.details == {
        "type": "KeyGenerationExhaustedException",
        "error": "Could not generate a unique access key after 5 attempts",
        "context": {"attempts": 5},
    }


def test_unknown_locale_falls_back_to_english() -> None:
    normalized = classify(DocumentExistsError(), locale="fr")
    assert normalized.user_message == MESSAGES["en"]["ALREADY_EXISTS"]


def test_error_code_of_normalizes_plain_code_attribute() -> None:
    class ProviderError(Exception):
        code = "permission-denied"

    assert error_code_of(ProviderError()) == "PERMISSION_DENIED"
    assert error_code_of(ValueError("x")) is None
    assert classify(ProviderError()).code == "PERMISSION_DENIED"


def test_message_for_unknown_code() -> None:
    assert message_for("NOPE") == MESSAGES["en"][UNKNOWN_ERROR]
    assert message_for("RATE_LIMIT_EXCEEDED", "vi") == MESSAGES["vi"]["RATE_LIMIT_EXCEEDED"]
