"""DTOs for the authenticated caller."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class CurrentUser:
    """Verified identity of the caller; ``role`` is filled in by the role check."""

    uid: str
    email: str | None = None
    email_verified: bool = False
    role: str | None = None

    def with_role(self, role: str) -> "CurrentUser":
        return replace(self, role=role)
