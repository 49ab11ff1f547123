"""Application services: error normalization, catalog lookups, role resolution."""

from app.application.services.catalog import CartContents, read_cart
from app.application.services.error_normalizer import (
    NormalizedError,
    classify,
    error_code_of,
)
from app.application.services.role_resolver import RoleResolver

__all__ = [
    "CartContents",
    "NormalizedError",
    "RoleResolver",
    "classify",
    "error_code_of",
    "read_cart",
]
