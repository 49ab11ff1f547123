"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import (
    AccessKeyStatus,
    ActivityAction,
    OrderStatus,
    PaymentMethod,
    UserRole,
)
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ConflictException,
    ELearningException,
    ResourceExhaustedException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    # Enums
    "AccessKeyStatus",
    "ActivityAction",
    "OrderStatus",
    "PaymentMethod",
    "UserRole",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "ConflictException",
    "ELearningException",
    "ResourceExhaustedException",
    "ResourceNotFoundException",
    "ValidationException",
]
