"""Order use cases."""

from app.application.use_cases.orders.create_order import OrderService

__all__ = ["OrderService"]
