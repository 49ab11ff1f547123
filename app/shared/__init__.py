"""Shared utilities: telemetry (logging) and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import ensure_utc, generate_access_key, generate_cuid, utc_now

__all__ = [
    "ensure_utc",
    "generate_access_key",
    "generate_cuid",
    "utc_now",
]
