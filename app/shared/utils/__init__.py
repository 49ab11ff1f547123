"""Shared utilities: datetime, generators."""

from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_access_key, generate_cuid

__all__ = [
    "ensure_utc",
    "generate_access_key",
    "generate_cuid",
    "utc_now",
]
