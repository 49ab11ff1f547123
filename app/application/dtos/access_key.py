"""DTOs for access key use cases (no dependency on Firestore)."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Cart:
    """Catalog items referenced by an order or unlocked by an access key."""

    subjects: tuple[str, ...] = ()
    courses: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.subjects and not self.courses

    def to_dict(self) -> dict[str, list[str]]:
        return {"subjects": list(self.subjects), "courses": list(self.courses)}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Cart":
        data = data or {}
        return cls(
            subjects=tuple(data.get("subjects") or ()),
            courses=tuple(data.get("courses") or ()),
        )


@dataclass(frozen=True)
class CreateAccessKeyCommand:
    """Input for generate-unique-access-key and bulk creation.

    Exactly one of unlocks_capability and cart_to_unlock must be set.
    """

    created_by: str
    unlocks_capability: str | None = None
    cart_to_unlock: Cart | None = None
    order_id: str | None = None


@dataclass(frozen=True)
class AccessKeyResult:
    """Stored access key (result of generate-unique-access-key)."""

    key: str
    status: str
    created_by: str
    unlocks_capability: str | None
    cart_to_unlock: Cart | None
    order_id: str | None
    attempts: int = 1


@dataclass(frozen=True)
class BulkAccessKeysResult:
    keys: list[str] = field(default_factory=list)
    operations_count: int = 0
    duration_ms: float = 0.0


@dataclass(frozen=True)
class RedeemAccessKeyResult:
    """Outcome of redeem-access-key."""

    key: str
    uid: str
    unlocks_capability: str | None
    can_create_quizzes: bool
    unlocked_quiz_ids: tuple[str, ...] = ()
