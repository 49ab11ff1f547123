"""Access key API schemas."""

from pydantic import Field, model_validator

from app.core.constants import ACCESS_KEY_MAX_INPUT_LENGTH
from app.schemas.common import CamelModel


class CartSchema(CamelModel):
    subjects: list[str] = Field(default_factory=list, max_length=100)
    courses: list[str] = Field(default_factory=list, max_length=100)


class AccessKeyCreateRequest(CamelModel):
    """Request body for POST /access-keys: exactly one unlock target."""

    unlocks_capability: str | None = Field(default=None, min_length=1, max_length=64)
    cart_to_unlock: CartSchema | None = None
    order_id: str | None = Field(default=None, min_length=1, max_length=128)

    @model_validator(mode="after")
    def exactly_one_target(self) -> "AccessKeyCreateRequest":
        has_cart = self.cart_to_unlock is not None and bool(
            self.cart_to_unlock.subjects or self.cart_to_unlock.courses
        )
        if bool(self.unlocks_capability) == has_cart:
            raise ValueError("Provide exactly one of unlocksCapability or cartToUnlock")
        return self


class AccessKeyBulkCreateRequest(AccessKeyCreateRequest):
    """Request body for POST /access-keys/bulk."""

    count: int = Field(..., ge=1, le=400)


class AccessKeyResponse(CamelModel):
    key: str
    status: str
    created_by: str
    unlocks_capability: str | None = None
    cart_to_unlock: CartSchema | None = None
    order_id: str | None = None


class AccessKeyBulkResponse(CamelModel):
    keys: list[str]
    count: int
    duration_ms: float


class RedeemRequest(CamelModel):
    key: str = Field(..., min_length=1, max_length=ACCESS_KEY_MAX_INPUT_LENGTH)


class RedeemResponse(CamelModel):
    key: str
    uid: str
    unlocks_capability: str | None = None
    can_create_quizzes: bool = False
    unlocked_quiz_count: int = 0
