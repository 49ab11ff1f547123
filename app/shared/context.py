"""Request context using contextvars (async-safe request-scoped data).

Usage:
    token = set_request_id("abc123")
    get_request_id()  # "abc123" anywhere in the same request's task
    reset_request_id(token)
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token:
    """Bind the request id for the current context; returns a reset token."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


def get_request_id() -> str | None:
    return _request_id.get()
