"""Role API schemas."""

from datetime import datetime

from pydantic import Field

from app.core.constants import ROLE_REASON_MAX_LENGTH
from app.domain.enums import UserRole
from app.schemas.common import CamelModel


class GrantRoleRequest(CamelModel):
    """Request body for POST /roles/grant."""

    uid: str = Field(..., min_length=1, max_length=128)
    role: UserRole
    reason: str | None = Field(default=None, max_length=ROLE_REASON_MAX_LENGTH)
    expires_at: datetime | None = None


class GrantRoleResponse(CamelModel):
    uid: str
    from_role: str
    to_role: str
    granted_by: str
    role_change_id: str
    reason: str | None = None
    expires_at: datetime | None = None
