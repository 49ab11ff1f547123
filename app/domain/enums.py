"""Domain enumerations for the e-learning backend.

Enums represent fixed sets of domain values (roles, key and order status).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class UserRole(_ValuesMixin, str, Enum):
    """Platform role stored on users/{uid}.role.

    Users without a stored role are treated as students.
    """

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class AccessKeyStatus(_ValuesMixin, str, Enum):
    """Access key lifecycle: new -> redeemed, exactly once."""

    NEW = "new"
    REDEEMED = "redeemed"


class OrderStatus(_ValuesMixin, str, Enum):
    """Order lifecycle status."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(_ValuesMixin, str, Enum):
    """Payment methods accepted when requesting an order."""

    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    MOMO = "momo"
    ZALOPAY = "zalopay"
    UNKNOWN = "unknown"


class ActivityAction(_ValuesMixin, str, Enum):
    """Action names written to userActivity."""

    CREATE_ACCESS_KEY = "create_access_key"
    BULK_CREATE_ACCESS_KEYS = "bulk_create_access_keys"
    REDEEM_ACCESS_KEY = "redeem_access_key"
    GRANT_ROLE = "grant_role"
    ROLE_CHANGED = "role_changed"
    CREATE_ORDER = "create_order"
    ORDER_CREATED = "order_created"
