"""Orders API: create an order for the caller's cart."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    get_order_service,
    log_activity,
    require_authenticated,
)
from app.application.dtos.access_key import Cart
from app.application.dtos.order import CreateOrderCommand
from app.application.dtos.user import CurrentUser
from app.application.use_cases.orders import OrderService
from app.core.limiter import limit_create_order
from app.domain.enums import ActivityAction
from app.schemas.common import ApiResponse
from app.schemas.order import CreateOrderRequest, OrderResponse

router = APIRouter()


@router.post("", response_model=ApiResponse[OrderResponse], status_code=201)
@limit_create_order
async def create_order(
    request: Request,
    body: CreateOrderRequest,
    current_user: Annotated[CurrentUser, Depends(require_authenticated)],
    _: Annotated[None, Depends(log_activity(ActivityAction.CREATE_ORDER))],
    service: Annotated[OrderService, Depends(get_order_service)],
):
    """Create a pending order; an admin issues the access key once paid."""
    result = await service.create_order(
        CreateOrderCommand(
            user_id=current_user.uid,
            user_email=current_user.email,
            cart=Cart(subjects=tuple(body.cart.subjects), courses=tuple(body.cart.courses)),
            payment_method=body.payment_method,
            amount=body.amount,
            notes=body.notes,
        )
    )
    return ApiResponse(
        data=OrderResponse(
            order_id=result.order_id,
            status=result.status,
            quiz_count=result.quiz_count,
            estimated_value=result.estimated_value,
            payment_method=result.payment_method,
            amount=result.amount,
        ),
        message="Order created. An admin will process it shortly.",
    )
