"""Application layer: DTOs, services, use cases.

Use cases run their reads and writes through the transaction runner and
raise domain exceptions for business rule violations.
"""

from app.application.services.error_normalizer import NormalizedError, classify
from app.application.use_cases import AccessKeyService, OrderService, RoleService

__all__ = [
    "AccessKeyService",
    "NormalizedError",
    "OrderService",
    "RoleService",
    "classify",
]
