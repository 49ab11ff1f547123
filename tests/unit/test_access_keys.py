"""AccessKeyService: unique key generation, bulk creation and redemption."""

import asyncio
import re

import pytest

from app.application.dtos.access_key import Cart, CreateAccessKeyCommand
from app.application.use_cases.access_keys import AccessKeyService, normalize_access_key
from app.domain.exceptions import (
    BatchCommitFailedException,
    KeyAlreadyUsedException,
    KeyGenerationExhaustedException,
    KeyNotFoundException,
    OrderNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from app.shared.utils.generators import generate_access_key

KEY_FORMAT = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")
QUIZ_CAPABILITY = "TEACHER_QUIZ_CREATION"


def _capability_command(**overrides) -> CreateAccessKeyCommand:
    return CreateAccessKeyCommand(
        created_by=overrides.pop("created_by", "admin-1"),
        unlocks_capability=overrides.pop("unlocks_capability", QUIZ_CAPABILITY),
        **overrides,
    )


def _sequence(*keys: str):
    """Key generator returning ``keys`` in order."""
    remaining = iter(keys)
    return lambda: next(remaining)


# ---- generation ----


def test_generated_keys_match_format() -> None:
    keys = {generate_access_key() for _ in range(200)}
    assert all(KEY_FORMAT.match(key) for key in keys)
    assert len(keys) > 190


async def test_generate_unique_key_creates_new_key(runner, emulator) -> None:
    service = AccessKeyService(runner)

    result = await service.generate_unique_key(_capability_command())

    assert KEY_FORMAT.match(result.key)
    assert result.status == "new"
    assert result.attempts == 1
    stored = emulator.document(f"accessKeys/{result.key}")
    assert stored["status"] == "new"
    assert stored["unlocksCapability"] == QUIZ_CAPABILITY
    assert stored["createdBy"] == "admin-1"
    assert "createdAt" in stored
    assert "cartToUnlock" not in stored


async def test_existing_key_is_regenerated(runner, emulator) -> None:
    emulator.seed("accessKeys/AAAA-AAAA-AAAA", {"status": "new"})
    service = AccessKeyService(
        runner, key_generator=_sequence("AAAA-AAAA-AAAA", "BBBB-BBBB-BBBB")
    )

    result = await service.generate_unique_key(_capability_command())

    assert result.key == "BBBB-BBBB-BBBB"
    assert result.attempts == 2
    assert emulator.document("accessKeys/AAAA-AAAA-AAAA") == {"status": "new"}


async def test_create_race_counts_as_collision(runner, emulator) -> None:
    """Another writer creating the id between read and commit is a collision, not a crash."""
    emulator.fail_next("commit", "ALREADY_EXISTS", "Document already exists")
    service = AccessKeyService(
        runner, key_generator=_sequence("CCCC-CCCC-CCCC", "DDDD-DDDD-DDDD")
    )

    result = await service.generate_unique_key(_capability_command())

    assert result.key == "DDDD-DDDD-DDDD"
    assert emulator.document("accessKeys/CCCC-CCCC-CCCC") is None


async def test_five_collisions_exhaust_generation(runner, emulator) -> None:
    keys = [f"KEY{n}-AAAA-AAAA" for n in range(5)]
    for key in keys:
        emulator.seed(f"accessKeys/{key}", {"status": "redeemed"})
    service = AccessKeyService(runner, key_generator=_sequence(*keys))

    with pytest.raises(KeyGenerationExhaustedException) as exc_info:
        await service.generate_unique_key(_capability_command())

    assert exc_info.value.details == {"attempts": 5}
    assert len(emulator.collection("accessKeys")) == 5
    assert all(not commit["writes"] for commit in emulator.calls("commit"))


@pytest.mark.parametrize(
    "command",
    [
        CreateAccessKeyCommand(created_by="admin-1"),
        CreateAccessKeyCommand(
            created_by="admin-1",
            unlocks_capability=QUIZ_CAPABILITY,
            cart_to_unlock=Cart(subjects=("s1",)),
        ),
        CreateAccessKeyCommand(created_by="admin-1", cart_to_unlock=Cart()),
        CreateAccessKeyCommand(created_by="", unlocks_capability=QUIZ_CAPABILITY),
    ],
)
async def test_invalid_metadata_rejected_before_store_access(
    runner, emulator, command
) -> None:
    with pytest.raises(ValidationException):
        await AccessKeyService(runner).generate_unique_key(command)
    assert emulator.requests == []


async def test_key_linked_to_order_in_same_transaction(runner, emulator) -> None:
    emulator.seed("orders/o1", {"status": "pending", "userId": "u1"})
    service = AccessKeyService(runner)

    result = await service.generate_unique_key(
        CreateAccessKeyCommand(
            created_by="admin-1",
            cart_to_unlock=Cart(subjects=("s1",)),
            order_id="o1",
        )
    )

    order = emulator.document("orders/o1")
    assert order["accessKeyGenerated"] is True
    assert order["accessKey"] == result.key
    assert order["status"] == "pending"
    key_doc = emulator.document(f"accessKeys/{result.key}")
    assert key_doc["orderId"] == "o1"
    assert key_doc["cartToUnlock"] == {"subjects": ["s1"], "courses": []}
    assert len(emulator.calls("commit")) == 1


async def test_missing_order_creates_nothing(runner, emulator) -> None:
    with pytest.raises(OrderNotFoundException):
        await AccessKeyService(runner).generate_unique_key(
            _capability_command(order_id="missing")
        )
    assert emulator.collection("accessKeys") == {}


# ---- bulk ----


async def test_bulk_create_writes_all_keys(runner, emulator) -> None:
    result = await AccessKeyService(runner).bulk_create(_capability_command(), 25)

    assert result.operations_count == 25
    assert len(set(result.keys)) == 25
    stored = emulator.collection("accessKeys")
    assert set(stored) == set(result.keys)
    assert all(doc["status"] == "new" for doc in stored.values())


async def test_bulk_create_collision_fails_whole_batch(runner, emulator) -> None:
    emulator.seed("accessKeys/EEEE-EEEE-EEEE", {"status": "new"})
    service = AccessKeyService(
        runner, key_generator=_sequence("FFFF-FFFF-FFFF", "EEEE-EEEE-EEEE")
    )

    with pytest.raises(BatchCommitFailedException):
        await service.bulk_create(_capability_command(), 2)
    assert set(emulator.collection("accessKeys")) == {"EEEE-EEEE-EEEE"}


@pytest.mark.parametrize("count", [0, 401])
async def test_bulk_count_out_of_range(runner, count) -> None:
    with pytest.raises(ValidationException):
        await AccessKeyService(runner).bulk_create(_capability_command(), count)


async def test_bulk_keys_cannot_link_order(runner) -> None:
    with pytest.raises(ValidationException):
        await AccessKeyService(runner).bulk_create(_capability_command(order_id="o1"), 2)


# ---- redeem ----


def test_normalize_access_key() -> None:
    assert normalize_access_key("  abcd-efgh-ijkl ") == "ABCD-EFGH-IJKL"
    with pytest.raises(ValidationException):
        normalize_access_key("   ")
    with pytest.raises(ValidationException):
        normalize_access_key("A" * 51)
    with pytest.raises(ValidationException):
        normalize_access_key("ab/cd/ef")


async def test_create_then_redeem_capability_key(runner, emulator) -> None:
    emulator.seed("users/u1", {"role": "teacher"})
    service = AccessKeyService(runner)
    created = await service.generate_unique_key(_capability_command())

    result = await service.redeem(created.key.lower(), "u1")

    assert result.can_create_quizzes is True
    user = emulator.document("users/u1")
    assert user["canCreateQuizzes"] is True
    assert user["lastAccessKeyUsed"] == created.key
    assert "lastKeyUsedAt" in user
    key_doc = emulator.document(f"accessKeys/{created.key}")
    assert key_doc["status"] == "redeemed"
    assert key_doc["usedBy"] == "u1"
    assert "usedAt" in key_doc


async def test_concurrent_redeem_has_one_winner(runner, emulator) -> None:
    emulator.seed("users/u1", {})
    emulator.seed("users/u2", {})
    emulator.seed("accessKeys/GGGG-GGGG-GGGG", {"status": "new", "unlocksCapability": QUIZ_CAPABILITY})
    service = AccessKeyService(runner)

    outcomes = await asyncio.gather(
        service.redeem("GGGG-GGGG-GGGG", "u1"),
        service.redeem("GGGG-GGGG-GGGG", "u2"),
        return_exceptions=True,
    )

    winners = [o for o in outcomes if not isinstance(o, Exception)]
    losers = [o for o in outcomes if isinstance(o, Exception)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert isinstance(losers[0], KeyAlreadyUsedException)
    key_doc = emulator.document("accessKeys/GGGG-GGGG-GGGG")
    assert key_doc["usedBy"] == winners[0].uid
    flagged = [
        uid for uid in ("u1", "u2") if emulator.document(f"users/{uid}").get("canCreateQuizzes")
    ]
    assert flagged == [winners[0].uid]


async def test_redeem_cart_unions_quiz_ids(runner, emulator) -> None:
    emulator.seed("users/u1", {"unlockedQuizzes": ["q1"]})
    emulator.seed("subjects/s1", {"quizIds": ["q1", "q2"]})
    emulator.seed("courses/c1", {"quizIds": ["q2", "q3"]})
    emulator.seed(
        "accessKeys/HHHH-HHHH-HHHH",
        {"status": "new", "cartToUnlock": {"subjects": ["s1", "s-missing"], "courses": ["c1"]}},
    )

    result = await AccessKeyService(runner).redeem("HHHH-HHHH-HHHH", "u1")

    assert result.can_create_quizzes is False
    assert result.unlocked_quiz_ids == ("q1", "q2", "q3")
    user = emulator.document("users/u1")
    assert user["unlockedQuizzes"] == ["q1", "q2", "q3"]
    assert "canCreateQuizzes" not in user


async def test_redeem_unknown_key(runner, emulator) -> None:
    emulator.seed("users/u1", {})
    with pytest.raises(KeyNotFoundException):
        await AccessKeyService(runner).redeem("ZZZZ-ZZZZ-ZZZZ", "u1")


async def test_redeem_used_key(runner, emulator) -> None:
    emulator.seed("users/u1", {})
    emulator.seed("accessKeys/IIII-IIII-IIII", {"status": "redeemed", "usedBy": "u0"})

    with pytest.raises(KeyAlreadyUsedException) as exc_info:
        await AccessKeyService(runner).redeem("IIII-IIII-IIII", "u1")

    assert exc_info.value.details["status"] == "redeemed"
    assert emulator.document("accessKeys/IIII-IIII-IIII")["usedBy"] == "u0"


async def test_redeem_without_user_profile(runner, emulator) -> None:
    emulator.seed("accessKeys/JJJJ-JJJJ-JJJJ", {"status": "new", "unlocksCapability": QUIZ_CAPABILITY})

    with pytest.raises(UserNotFoundException):
        await AccessKeyService(runner).redeem("JJJJ-JJJJ-JJJJ", "ghost")

    assert emulator.document("accessKeys/JJJJ-JJJJ-JJJJ")["status"] == "new"


async def test_redeem_rejects_key_with_path_separator(runner, emulator) -> None:
    emulator.seed("users/u1", {})
    emulator.seed("accessKeys/AB/CD/EF", {"status": "new", "unlocksCapability": QUIZ_CAPABILITY})

    with pytest.raises(ValidationException):
        await AccessKeyService(runner).redeem("ab/cd/ef", "u1")

    assert emulator.requests == []
    assert emulator.document("accessKeys/AB/CD/EF")["status"] == "new"
