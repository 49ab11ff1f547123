"""Create-order use case: validate the cart and record a pending order."""

from __future__ import annotations

from app.application.dtos.order import CreateOrderCommand, OrderResult
from app.application.services.catalog import read_cart
from app.core.constants import (
    COURSE_QUIZ_PRICE,
    MAX_ORDER_AMOUNT,
    ORDER_NOTES_MAX_LENGTH,
    SUBJECT_QUIZ_PRICE,
)
from app.domain.enums import ActivityAction, OrderStatus, PaymentMethod
from app.domain.exceptions import ValidationException
from app.infrastructure.firebase._rest_client import Transaction
from app.infrastructure.firebase._rest_encoding import SERVER_TIMESTAMP
from app.infrastructure.firebase.collections import (
    COLLECTION_ORDERS,
    COLLECTION_USER_ACTIVITY,
)
from app.infrastructure.firebase.transactions import TransactionRunner
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _validate(command: CreateOrderCommand) -> None:
    if not command.user_id:
        raise ValidationException("user_id is required", field="user_id")
    if command.cart.is_empty:
        raise ValidationException(
            "Cart must contain at least one subject or course", field="cart"
        )
    try:
        PaymentMethod(command.payment_method)
    except ValueError as e:
        raise ValidationException(
            f"paymentMethod must be one of {PaymentMethod.values()}",
            field="paymentMethod",
        ) from e
    if command.amount < 0 or command.amount > MAX_ORDER_AMOUNT:
        raise ValidationException(
            f"amount must be between 0 and {MAX_ORDER_AMOUNT}", field="amount"
        )
    if command.notes and len(command.notes) > ORDER_NOTES_MAX_LENGTH:
        raise ValidationException(
            f"notes must be at most {ORDER_NOTES_MAX_LENGTH} characters", field="notes"
        )


class OrderService:
    """Creates orders for catalog carts."""

    def __init__(self, runner: TransactionRunner) -> None:
        self.runner = runner
        self.db = runner.client

    async def create_order(self, command: CreateOrderCommand) -> OrderResult:
        """Create a pending order after checking every cart item exists.

        ``estimatedValue`` prices subject quizzes at SUBJECT_QUIZ_PRICE and
        course quizzes at COURSE_QUIZ_PRICE.

        Raises:
            ValidationException: Bad input, or the cart references unknown
                subjects/courses (listed in details).
        """
        _validate(command)
        result = await self.runner.execute(lambda txn: self._create(txn, command))
        logger.info("Order created: %s by user %s", result.order_id, command.user_id)
        return result

    async def _create(self, txn: Transaction, command: CreateOrderCommand) -> OrderResult:
        contents = await read_cart(txn, self.db, command.cart)
        if contents.has_missing:
            error = ValidationException("Cart contains unknown items", field="cart")
            error.details.update(
                {
                    "missing_subjects": contents.missing_subjects,
                    "missing_courses": contents.missing_courses,
                }
            )
            raise error

        quiz_count = contents.quiz_count
        estimated_value = (
            len(contents.subject_quiz_ids) * SUBJECT_QUIZ_PRICE
            + len(contents.course_quiz_ids) * COURSE_QUIZ_PRICE
        )
        payment_method = PaymentMethod(command.payment_method)

        order_ref = self.db.collection(COLLECTION_ORDERS).document()
        txn.create(
            order_ref,
            {
                "userId": command.user_id,
                "userEmail": command.user_email,
                "cart": command.cart.to_dict(),
                "paymentMethod": payment_method.value,
                "amount": command.amount,
                "notes": command.notes or None,
                "status": OrderStatus.PENDING.value,
                "quizCount": quiz_count,
                "estimatedValue": estimated_value,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        txn.set(
            self.db.collection(COLLECTION_USER_ACTIVITY).document(),
            {
                "uid": command.user_id,
                "action": ActivityAction.ORDER_CREATED.value,
                "orderId": order_ref.id,
                "cartSummary": {
                    "subjectsCount": len(command.cart.subjects),
                    "coursesCount": len(command.cart.courses),
                    "quizCount": quiz_count,
                },
                "timestamp": SERVER_TIMESTAMP,
            },
        )
        return OrderResult(
            order_id=order_ref.id,
            status=OrderStatus.PENDING,
            quiz_count=quiz_count,
            estimated_value=estimated_value,
            payment_method=payment_method,
            amount=command.amount,
        )
