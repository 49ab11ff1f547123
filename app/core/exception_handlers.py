"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Every error response is the
envelope {success: false, code, message, details?}; code and message come
from the error normalizer, details only in debug mode.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.application.services.error_normalizer import NormalizedError, classify, message_for
from app.core.config import get_settings
from app.domain.exceptions import ELearningException
from app.infrastructure.exceptions import FirestoreException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "KEY_NOT_FOUND": 404,
    "USER_NOT_FOUND": 404,
    "ORDER_NOT_FOUND": 404,
    "KEY_ALREADY_USED": 409,
    "BATCH_ALREADY_ACTIVE": 409,
    "NO_ACTIVE_BATCH": 409,
    "BATCH_SIZE_EXCEEDED": 413,
    "BATCH_COMMIT_FAILED": 502,
    "KEY_GENERATION_EXHAUSTED": 503,
    "SERVICE_UNAVAILABLE": 503,
}

# Firestore status -> HTTP status for store errors that reach the caller
_STORE_CODE_STATUS: dict[str, int] = {
    "ABORTED": 409,
    "ALREADY_EXISTS": 409,
    "FAILED_PRECONDITION": 400,
    "OUT_OF_RANGE": 400,
    "NOT_FOUND": 404,
    "PERMISSION_DENIED": 403,
    "UNAUTHENTICATED": 401,
    "RESOURCE_EXHAUSTED": 429,
    "UNIMPLEMENTED": 501,
    "INTERNAL": 500,
    "DATA_LOSS": 500,
    "UNAVAILABLE": 503,
    "DEADLINE_EXCEEDED": 504,
}

_HTTP_STATUS_CODES: dict[int, str] = {
    401: "AUTHENTICATION_ERROR",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
}


def status_for(exc: ELearningException) -> int:
    """HTTP status for a domain or store exception."""
    if isinstance(exc, FirestoreException):
        return _STORE_CODE_STATUS.get(exc.code, 502)
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _error_response(status_code: int, normalized: NormalizedError) -> JSONResponse:
    content: dict = {
        "success": False,
        "code": normalized.code,
        "message": normalized.user_message,
    }
    if normalized.details is not None:
        content["details"] = jsonable_encoder(normalized.details)
    return JSONResponse(status_code=status_code, content=content)


def _elearning_exception_handler(
    request: Request, exc: ELearningException
) -> JSONResponse:
    """Classify the exception and map its code to a status."""
    settings = get_settings()
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.error_code, exc)
    return _error_response(
        status,
        classify(exc, locale=settings.error_locale, debug=settings.debug),
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 400 with the field errors (they only echo the caller's own input)."""
    settings = get_settings()
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "code": "VALIDATION_ERROR",
            "message": message_for("VALIDATION_ERROR", settings.error_locale),
            "details": jsonable_encoder(exc.errors()),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return the envelope for Starlette HTTP exceptions (404 route, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "code": _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
            "message": str(exc.detail),
        },
        headers=getattr(exc, "headers", None),
    )


def _rate_limit_exception_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    settings = get_settings()
    logger.warning("Rate limit exceeded on %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "code": "RATE_LIMIT_EXCEEDED",
            "message": message_for("RATE_LIMIT_EXCEEDED", settings.error_locale),
        },
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500 UNKNOWN_ERROR; internal detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    return _error_response(
        500, classify(exc, locale=settings.error_locale, debug=settings.debug)
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: ELearningException (and
    subclasses, including store errors), RequestValidationError,
    StarletteHTTPException, RateLimitExceeded, generic Exception.
    """
    app.add_exception_handler(ELearningException, _elearning_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
