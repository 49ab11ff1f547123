"""Domain exceptions for the e-learning backend.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers, and the error
normalizer turns them into user-facing messages.
"""

from typing import Any


class ELearningException(Exception):
    """Base exception for all application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(ELearningException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(ELearningException):
    """Raised when authentication fails (e.g. missing or invalid token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(ELearningException):
    """Raised when the caller may not perform the operation."""

    def __init__(
        self,
        message: str = "Permission denied",
        required_roles: list[str] | None = None,
    ) -> None:
        """Initialize with message and optional roles that would have been allowed.

        Args:
            message: Human-readable message.
            required_roles: Roles accepted by the failed check, if any.
        """
        details: dict[str, Any] = {}
        if required_roles:
            details["required_roles"] = required_roles
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(ELearningException):
    """Raised when a requested document is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        error_code: str = "RESOURCE_NOT_FOUND",
    ) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'access_key', 'user').
            resource_id: The ID that was not found.
            error_code: Specific code for subclasses.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            error_code,
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class KeyNotFoundException(ResourceNotFoundException):
    """Raised when redeeming a key that does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__("access_key", key, "KEY_NOT_FOUND")


class UserNotFoundException(ResourceNotFoundException):
    """Raised when the target user document does not exist."""

    def __init__(self, uid: str) -> None:
        super().__init__("user", uid, "USER_NOT_FOUND")


class OrderNotFoundException(ResourceNotFoundException):
    """Raised when an access key is linked to an order that does not exist."""

    def __init__(self, order_id: str) -> None:
        super().__init__("order", order_id, "ORDER_NOT_FOUND")


class ConflictException(ELearningException):
    """Raised when the current state forbids the operation (4xx, not retried)."""


class KeyAlreadyUsedException(ConflictException):
    """Raised when a key is not in status 'new' (already redeemed)."""

    def __init__(self, key: str, status: str | None = None) -> None:
        super().__init__(
            f"Access key has already been used: {key}",
            "KEY_ALREADY_USED",
            {"key": key, "status": status},
        )


class BatchAlreadyActiveException(ConflictException):
    """Raised by start_batch() while a batch is still open (no nesting)."""

    def __init__(self, queued: int) -> None:
        super().__init__(
            "A batch is already active; commit or roll it back first",
            "BATCH_ALREADY_ACTIVE",
            {"queued_operations": queued},
        )


class NoActiveBatchException(ConflictException):
    """Raised when queueing or committing without start_batch()."""

    def __init__(self) -> None:
        super().__init__(
            "No active batch; call start_batch() first",
            "NO_ACTIVE_BATCH",
        )


class ResourceExhaustedException(ELearningException):
    """Raised when a hard limit is reached (fatal, not retried)."""


class BatchSizeExceededException(ResourceExhaustedException):
    """Raised when queueing beyond the per-batch operation cap."""

    def __init__(self, max_operations: int) -> None:
        super().__init__(
            f"Batch size limit exceeded ({max_operations} operations)",
            "BATCH_SIZE_EXCEEDED",
            {"max_operations": max_operations},
        )


class KeyGenerationExhaustedException(ResourceExhaustedException):
    """Raised when every generated access key candidate collided."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Could not generate a unique access key after {attempts} attempts",
            "KEY_GENERATION_EXHAUSTED",
            {"attempts": attempts},
        )


class BatchCommitFailedException(ELearningException):
    """Raised when a batch commit fails; carries the original error and operations."""

    def __init__(self, original_error: Exception, operations: list[Any]) -> None:
        """Initialize with the underlying store error and the attempted operations.

        Args:
            original_error: Exception raised by the store commit.
            operations: Operations that were queued (none of them applied).
        """
        self.original_error = original_error
        self.operations = operations
        super().__init__(
            "Batch commit failed",
            "BATCH_COMMIT_FAILED",
            {
                "operations_count": len(operations),
                "original_error": getattr(original_error, "code", None)
                or type(original_error).__name__,
            },
        )
