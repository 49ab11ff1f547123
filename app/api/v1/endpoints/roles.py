"""Roles API: grant a role to another user (admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    get_role_resolver,
    get_role_service,
    log_activity,
    require_admin,
)
from app.application.dtos.role import GrantRoleCommand
from app.application.dtos.user import CurrentUser
from app.application.services.role_resolver import RoleResolver
from app.application.use_cases.roles import RoleService
from app.core.limiter import limit_grant_role
from app.domain.enums import ActivityAction
from app.domain.exceptions import AuthorizationException
from app.schemas.common import ApiResponse
from app.schemas.role import GrantRoleRequest, GrantRoleResponse

router = APIRouter()


@router.post("/grant", response_model=ApiResponse[GrantRoleResponse])
@limit_grant_role
async def grant_role(
    request: Request,
    body: GrantRoleRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    _: Annotated[None, Depends(log_activity(ActivityAction.GRANT_ROLE))],
    service: Annotated[RoleService, Depends(get_role_service)],
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
):
    """Grant a role; admins cannot change their own role."""
    if body.uid == current_user.uid:
        raise AuthorizationException("You cannot change your own role")
    result = await service.grant_role(
        GrantRoleCommand(
            uid=body.uid,
            role=body.role,
            granted_by=current_user.uid,
            reason=body.reason,
            expires_at=body.expires_at,
        )
    )
    await resolver.invalidate(body.uid)
    return ApiResponse(
        data=GrantRoleResponse(
            uid=result.uid,
            from_role=result.from_role,
            to_role=result.to_role,
            granted_by=result.granted_by,
            role_change_id=result.role_change_id,
            reason=result.reason,
            expires_at=result.expires_at,
        ),
        message=f"Role changed from {result.from_role} to {result.to_role}",
    )
