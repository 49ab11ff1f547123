"""DTOs for role use cases (no dependency on Firestore)."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import UserRole


@dataclass(frozen=True)
class GrantRoleCommand:
    uid: str
    role: UserRole
    granted_by: str
    reason: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class GrantRoleResult:
    """Result of grant-role: the chained from/to roles and the log entry id."""

    uid: str
    from_role: str
    to_role: str
    granted_by: str
    role_change_id: str
    reason: str | None = None
    expires_at: datetime | None = None
