"""Infrastructure exceptions for Firestore operations.

Store errors extend ELearningException so presentation can map them
to HTTP responses consistently. ``code`` carries the canonical status
name Firestore returns (e.g. ABORTED, NOT_FOUND).
"""

from app.domain.exceptions import ELearningException

# Status names that signal contention or a transient backend condition.
TRANSIENT_STATUS_CODES = frozenset(
    {"ABORTED", "DEADLINE_EXCEEDED", "RESOURCE_EXHAUSTED", "INTERNAL"}
)


class FirestoreException(ELearningException):
    """Error returned by the Firestore REST API (or raised while reaching it)."""

    def __init__(
        self,
        code: str,
        message: str,
        http_status: int | None = None,
    ) -> None:
        self.code = code
        self.http_status = http_status
        super().__init__(
            message,
            code,
            {"http_status": http_status} if http_status is not None else {},
        )


class DocumentExistsError(FirestoreException):
    """Raised when a create precondition fails (document ID already exists)."""

    def __init__(self, message: str = "Document already exists") -> None:
        super().__init__("ALREADY_EXISTS", message, 409)


class FirestoreNotConfiguredException(ELearningException):
    """Raised when an operation needs Firestore but the client was not initialized."""

    def __init__(self) -> None:
        super().__init__(
            message="Firestore is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
