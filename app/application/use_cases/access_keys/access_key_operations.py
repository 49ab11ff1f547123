"""Access key operations: generate unique key, bulk create, redeem.

Every read-modify-write runs through the TransactionRunner; business rule
violations raise domain exceptions from inside the work function so the
runner propagates them without retrying.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from app.application.dtos.access_key import (
    AccessKeyResult,
    BulkAccessKeysResult,
    Cart,
    CreateAccessKeyCommand,
    RedeemAccessKeyResult,
)
from app.application.services.catalog import read_cart
from app.core.constants import (
    ACCESS_KEY_ALPHABET,
    ACCESS_KEY_MAX_INPUT_LENGTH,
    ACCESS_KEY_SEPARATOR,
    CAPABILITY_TEACHER_QUIZ_CREATION,
)
from app.domain.enums import AccessKeyStatus
from app.domain.exceptions import (
    KeyAlreadyUsedException,
    KeyGenerationExhaustedException,
    KeyNotFoundException,
    OrderNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from app.infrastructure.exceptions import DocumentExistsError
from app.infrastructure.firebase._rest_client import Transaction
from app.infrastructure.firebase._rest_encoding import SERVER_TIMESTAMP, ArrayUnion
from app.infrastructure.firebase.batch import BatchWriteQueue
from app.infrastructure.firebase.collections import (
    COLLECTION_ACCESS_KEYS,
    COLLECTION_ORDERS,
    COLLECTION_USERS,
)
from app.infrastructure.firebase.transactions import TransactionRunner
from app.shared.telemetry.logging import get_logger
from app.shared.utils.generators import generate_access_key

logger = get_logger(__name__)

DEFAULT_MAX_KEY_ATTEMPTS = 5
MAX_BULK_KEYS = 400
_ACCESS_KEY_CHARS = frozenset(ACCESS_KEY_ALPHABET + ACCESS_KEY_SEPARATOR)


def normalize_access_key(raw: str | None) -> str:
    """Trim and upper-case a user-typed key; reject empty, oversized or malformed input."""
    key = (raw or "").strip().upper()
    if not key:
        raise ValidationException("Access key must not be empty", field="key")
    if len(key) > ACCESS_KEY_MAX_INPUT_LENGTH:
        raise ValidationException(
            f"Access key must be at most {ACCESS_KEY_MAX_INPUT_LENGTH} characters",
            field="key",
        )
    if not set(key) <= _ACCESS_KEY_CHARS:
        raise ValidationException(
            "Access key may only contain letters, digits and '-'", field="key"
        )
    return key


def _validate_create(command: CreateAccessKeyCommand) -> None:
    has_capability = bool(command.unlocks_capability and command.unlocks_capability.strip())
    has_cart = command.cart_to_unlock is not None and not command.cart_to_unlock.is_empty
    if has_capability == has_cart:
        raise ValidationException(
            "Provide exactly one of unlocksCapability or cartToUnlock",
            field="unlocksCapability",
        )
    if not command.created_by:
        raise ValidationException("created_by is required", field="created_by")


def _key_document(command: CreateAccessKeyCommand, key: str) -> dict[str, Any]:
    data: dict[str, Any] = {
        "key": key,
        "status": AccessKeyStatus.NEW.value,
        "createdBy": command.created_by,
    }
    if command.unlocks_capability:
        data["unlocksCapability"] = command.unlocks_capability.strip()
    else:
        data["cartToUnlock"] = command.cart_to_unlock.to_dict()
    if command.order_id:
        data["orderId"] = command.order_id
    return data


class AccessKeyService:
    """Creates and redeems single-use access keys."""

    def __init__(
        self,
        runner: TransactionRunner,
        *,
        max_attempts: int = DEFAULT_MAX_KEY_ATTEMPTS,
        key_generator: Callable[[], str] = generate_access_key,
        batch_max_operations: int = MAX_BULK_KEYS,
    ) -> None:
        self.runner = runner
        self.db = runner.client
        self.max_attempts = max_attempts
        self.batch_max_operations = batch_max_operations
        self._key_generator = key_generator

    async def generate_unique_key(self, command: CreateAccessKeyCommand) -> AccessKeyResult:
        """Create a key under a fresh random id, regenerating on collision.

        The existence check and the create share one transaction, and the
        create carries an exists=false precondition, so a concurrent creator
        of the same id loses at commit and is treated as another collision.

        Raises:
            ValidationException: Unlock metadata is missing or ambiguous.
            OrderNotFoundException: order_id does not reference an order.
            KeyGenerationExhaustedException: Every candidate collided.
        """
        _validate_create(command)

        for attempt in range(1, self.max_attempts + 1):
            candidate = self._key_generator()
            try:
                created = await self.runner.execute(
                    lambda txn, key=candidate: self._create_if_absent(txn, command, key)
                )
            except DocumentExistsError:
                created = False
            if created:
                logger.info(
                    "Access key created by %s (attempt %d)", command.created_by, attempt
                )
                return AccessKeyResult(
                    key=candidate,
                    status=AccessKeyStatus.NEW.value,
                    created_by=command.created_by,
                    unlocks_capability=command.unlocks_capability,
                    cart_to_unlock=None if command.unlocks_capability else command.cart_to_unlock,
                    order_id=command.order_id,
                    attempts=attempt,
                )
            logger.warning("Access key collision on attempt %d, regenerating", attempt)

        raise KeyGenerationExhaustedException(self.max_attempts)

    async def _create_if_absent(
        self, txn: Transaction, command: CreateAccessKeyCommand, key: str
    ) -> bool:
        key_ref = self.db.collection(COLLECTION_ACCESS_KEYS).document(key)
        if await txn.get(key_ref) is not None:
            return False

        order_ref = None
        if command.order_id:
            order_ref = self.db.collection(COLLECTION_ORDERS).document(command.order_id)
            if await txn.get(order_ref) is None:
                raise OrderNotFoundException(command.order_id)

        txn.create(key_ref, {**_key_document(command, key), "createdAt": SERVER_TIMESTAMP})
        if order_ref is not None:
            txn.update(
                order_ref,
                {
                    "accessKeyGenerated": True,
                    "accessKey": key,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        return True

    async def bulk_create(
        self,
        command: CreateAccessKeyCommand,
        count: int,
        max_operations: int | None = None,
    ) -> BulkAccessKeysResult:
        """Create ``count`` keys with the same unlock metadata in one batch.

        Creates carry exists=false preconditions, so an id collision fails the
        whole batch (BatchCommitFailedException) and nothing is written.
        """
        _validate_create(command)
        if command.order_id:
            raise ValidationException(
                "Bulk-created keys cannot be linked to an order", field="orderId"
            )
        max_operations = max_operations or self.batch_max_operations
        if count < 1 or count > max_operations:
            raise ValidationException(
                f"count must be between 1 and {max_operations}", field="count"
            )

        batch = BatchWriteQueue(self.db, max_operations=max_operations)
        batch.start_batch()
        keys: list[str] = []
        for _ in range(count):
            key = self._key_generator()
            batch.create(COLLECTION_ACCESS_KEYS, key, _key_document(command, key))
            keys.append(key)
        result = await batch.commit()
        logger.info("Bulk created %d access keys by %s", len(keys), command.created_by)
        return BulkAccessKeysResult(
            keys=keys,
            operations_count=result.operations_count,
            duration_ms=result.duration_ms,
        )

    async def redeem(self, raw_key: str, uid: str) -> RedeemAccessKeyResult:
        """Redeem a key for ``uid``; exactly one concurrent redeemer wins.

        A losing concurrent redeemer's commit is aborted, the runner retries,
        and the re-read sees status 'redeemed'.

        Raises:
            ValidationException: Key input empty or too long.
            KeyNotFoundException: No such key.
            KeyAlreadyUsedException: Key status is not 'new'.
            UserNotFoundException: Redeeming user has no profile.
        """
        key = normalize_access_key(raw_key)
        if not uid:
            raise ValidationException("uid is required", field="uid")
        result = await self.runner.execute(lambda txn: self._redeem(txn, key, uid))
        logger.info("Access key %s redeemed by %s", key, uid)
        return result

    async def _redeem(self, txn: Transaction, key: str, uid: str) -> RedeemAccessKeyResult:
        key_ref = self.db.collection(COLLECTION_ACCESS_KEYS).document(key)
        key_snap = await txn.get(key_ref)
        if key_snap is None:
            raise KeyNotFoundException(key)
        key_data = key_snap.to_dict()
        status = key_data.get("status")
        if status != AccessKeyStatus.NEW.value:
            raise KeyAlreadyUsedException(key, status)

        user_ref = self.db.collection(COLLECTION_USERS).document(uid)
        if await txn.get(user_ref) is None:
            raise UserNotFoundException(uid)

        user_update: dict[str, Any] = {
            "lastAccessKeyUsed": key,
            "lastKeyUsedAt": SERVER_TIMESTAMP,
        }
        capability = key_data.get("unlocksCapability")
        can_create = capability == CAPABILITY_TEACHER_QUIZ_CREATION
        if can_create:
            user_update["canCreateQuizzes"] = True

        quiz_ids: list[str] = []
        if not capability and key_data.get("cartToUnlock"):
            contents = await read_cart(txn, self.db, Cart.from_dict(key_data["cartToUnlock"]))
            if contents.has_missing:
                logger.warning(
                    "Key %s references missing catalog items: subjects=%s courses=%s",
                    key,
                    contents.missing_subjects,
                    contents.missing_courses,
                )
            quiz_ids = contents.quiz_ids
            if quiz_ids:
                user_update["unlockedQuizzes"] = ArrayUnion(quiz_ids)

        txn.update(
            key_ref,
            {
                "status": AccessKeyStatus.REDEEMED.value,
                "usedBy": uid,
                "usedAt": SERVER_TIMESTAMP,
            },
        )
        txn.update(user_ref, user_update)
        return RedeemAccessKeyResult(
            key=key,
            uid=uid,
            unlocks_capability=capability,
            can_create_quizzes=can_create,
            unlocked_quiz_ids=tuple(quiz_ids),
        )
