"""Request ID middleware.

Forwards a client X-Request-ID (or generates one), binds it to the logging
context for the duration of the request and echoes it on the response.
Client values are restricted to a safe charset and length so they cannot
inject into log lines. Raw ASGI, so streaming responses are unaffected.
"""

import re
from typing import Callable

from app.shared.context import reset_request_id, set_request_id
from app.shared.utils.generators import generate_cuid

REQUEST_ID_MAX_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,%d}$" % REQUEST_ID_MAX_LENGTH)


def _header_value(scope: dict, name: str) -> str | None:
    wanted = name.lower().encode()
    for key, value in scope.get("headers", []):
        if key.lower() == wanted:
            return value.decode("latin-1").strip()
    return None


def resolve_request_id(raw: str | None) -> str:
    """Return ``raw`` when safe to log, otherwise a fresh id."""
    if raw and _SAFE_REQUEST_ID.match(raw):
        return raw
    return generate_cuid()


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """ASGI middleware factory adding the request id header."""
    header_bytes = header_name.lower().encode()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = resolve_request_id(_header_value(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_header(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (header_bytes, request_id.encode()),
                ]
            await send(message)

        token = set_request_id(request_id)
        try:
            await app(scope, receive, send_with_header)
        finally:
            reset_request_id(token)

    return asgi_app
