"""DTOs for order use cases."""

from dataclasses import dataclass

from app.application.dtos.access_key import Cart
from app.domain.enums import OrderStatus, PaymentMethod


@dataclass(frozen=True)
class CreateOrderCommand:
    user_id: str
    cart: Cart
    payment_method: PaymentMethod
    amount: int
    user_email: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class OrderResult:
    """Created order summary returned to the caller."""

    order_id: str
    status: OrderStatus
    quiz_count: int
    estimated_value: int
    payment_method: PaymentMethod
    amount: int
