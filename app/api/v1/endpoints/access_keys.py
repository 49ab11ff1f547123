"""Access keys API: create (single and bulk) and redeem."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    get_access_key_service,
    log_activity,
    require_admin,
    require_authenticated,
)
from app.application.dtos.access_key import (
    AccessKeyResult,
    Cart,
    CreateAccessKeyCommand,
)
from app.application.dtos.user import CurrentUser
from app.application.use_cases.access_keys import AccessKeyService
from app.core.limiter import limit_create_access_key, limit_redeem_access_key
from app.domain.enums import ActivityAction
from app.schemas.access_key import (
    AccessKeyBulkCreateRequest,
    AccessKeyBulkResponse,
    AccessKeyCreateRequest,
    AccessKeyResponse,
    CartSchema,
    RedeemRequest,
    RedeemResponse,
)
from app.schemas.common import ApiResponse

router = APIRouter()


def _to_command(body: AccessKeyCreateRequest, created_by: str) -> CreateAccessKeyCommand:
    cart = None
    if body.cart_to_unlock is not None:
        cart = Cart(
            subjects=tuple(body.cart_to_unlock.subjects),
            courses=tuple(body.cart_to_unlock.courses),
        )
    return CreateAccessKeyCommand(
        created_by=created_by,
        unlocks_capability=body.unlocks_capability,
        cart_to_unlock=cart,
        order_id=body.order_id,
    )


def _to_response(result: AccessKeyResult) -> AccessKeyResponse:
    cart = result.cart_to_unlock
    return AccessKeyResponse(
        key=result.key,
        status=result.status,
        created_by=result.created_by,
        unlocks_capability=result.unlocks_capability,
        cart_to_unlock=CartSchema(subjects=list(cart.subjects), courses=list(cart.courses))
        if cart is not None
        else None,
        order_id=result.order_id,
    )


@router.post("", response_model=ApiResponse[AccessKeyResponse], status_code=201)
@limit_create_access_key
async def create_access_key(
    request: Request,
    body: AccessKeyCreateRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    _: Annotated[None, Depends(log_activity(ActivityAction.CREATE_ACCESS_KEY))],
    service: Annotated[AccessKeyService, Depends(get_access_key_service)],
):
    """Generate a unique key (admin). Optionally links the key to an order."""
    result = await service.generate_unique_key(_to_command(body, current_user.uid))
    return ApiResponse(
        data=_to_response(result), message="Access key created successfully"
    )


@router.post("/bulk", response_model=ApiResponse[AccessKeyBulkResponse], status_code=201)
@limit_create_access_key
async def bulk_create_access_keys(
    request: Request,
    body: AccessKeyBulkCreateRequest,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    _: Annotated[None, Depends(log_activity(ActivityAction.BULK_CREATE_ACCESS_KEYS))],
    service: Annotated[AccessKeyService, Depends(get_access_key_service)],
):
    """Create up to 400 keys with the same unlock target in one atomic batch (admin)."""
    result = await service.bulk_create(_to_command(body, current_user.uid), body.count)
    return ApiResponse(
        data=AccessKeyBulkResponse(
            keys=result.keys,
            count=result.operations_count,
            duration_ms=result.duration_ms,
        ),
        message=f"{result.operations_count} access keys created",
    )


@router.post("/redeem", response_model=ApiResponse[RedeemResponse])
@limit_redeem_access_key
async def redeem_access_key(
    request: Request,
    body: RedeemRequest,
    current_user: Annotated[CurrentUser, Depends(require_authenticated)],
    _: Annotated[None, Depends(log_activity(ActivityAction.REDEEM_ACCESS_KEY))],
    service: Annotated[AccessKeyService, Depends(get_access_key_service)],
):
    """Redeem a key for the caller."""
    result = await service.redeem(body.key, current_user.uid)
    if result.can_create_quizzes:
        message = "Quiz creation unlocked"
    elif result.unlocked_quiz_ids:
        message = f"Key redeemed: {len(result.unlocked_quiz_ids)} quizzes unlocked"
    else:
        message = "Key redeemed"
    return ApiResponse(
        data=RedeemResponse(
            key=result.key,
            uid=result.uid,
            unlocks_capability=result.unlocks_capability,
            can_create_quizzes=result.can_create_quizzes,
            unlocked_quiz_count=len(result.unlocked_quiz_ids),
        ),
        message=message,
    )
