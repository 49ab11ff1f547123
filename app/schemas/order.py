"""Order API schemas."""

from pydantic import Field, field_validator

from app.core.constants import MAX_ORDER_AMOUNT, ORDER_NOTES_MAX_LENGTH
from app.domain.enums import OrderStatus, PaymentMethod
from app.schemas.access_key import CartSchema
from app.schemas.common import CamelModel


class CreateOrderRequest(CamelModel):
    """Request body for POST /orders."""

    cart: CartSchema
    payment_method: PaymentMethod = PaymentMethod.UNKNOWN
    amount: int = Field(default=0, ge=0, le=MAX_ORDER_AMOUNT)
    notes: str | None = Field(default=None, max_length=ORDER_NOTES_MAX_LENGTH)

    @field_validator("cart")
    @classmethod
    def cart_not_empty(cls, v: CartSchema) -> CartSchema:
        if not v.subjects and not v.courses:
            raise ValueError("Cart must contain at least one subject or course")
        return v


class OrderResponse(CamelModel):
    order_id: str
    status: OrderStatus
    quiz_count: int
    estimated_value: int
    payment_method: PaymentMethod
    amount: int
