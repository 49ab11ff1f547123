"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings
from app.shared.context import get_request_id

# Third-party loggers that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "google.auth")


class RequestIdFilter(logging.Filter):
    """Adds ``request_id`` to every record ('-' outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO. Output goes
    to stdout with the request id of the current request. HTTP client
    libraries are capped at WARNING so Firestore round-trips do not flood
    the log.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
        handlers=[handler],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)
