"""Access key endpoints: auth pipeline, envelopes and status codes."""

import re

from httpx import AsyncClient

from app.core.config import get_settings
from tests.fakes.auth import bearer

KEY_FORMAT = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")
CAPABILITY_BODY = {"unlocksCapability": "TEACHER_QUIZ_CREATION"}


async def test_missing_token_returns_401(client: AsyncClient) -> None:
    response = await client.post("/api/v1/access-keys", json=CAPABILITY_BODY)
    assert response.status_code == 401
    body = response.json()
    assert body == {
        "success": False,
        "code": "AUTHENTICATION_ERROR",
        "message": "Please sign in to perform this action",
    }


async def test_invalid_token_returns_401(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/access-keys",
        json=CAPABILITY_BODY,
        headers={"Authorization": "Bearer forged"},
    )
    assert response.status_code == 401


async def test_student_cannot_create_keys(client: AsyncClient, student, emulator) -> None:
    response = await client.post("/api/v1/access-keys", json=CAPABILITY_BODY, headers=bearer(student))
    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"
    assert emulator.collection("accessKeys") == {}
    assert emulator.collection("userActivity") == {}


async def test_admin_creates_key(client: AsyncClient, admin, emulator) -> None:
    response = await client.post("/api/v1/access-keys", json=CAPABILITY_BODY, headers=bearer(admin))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert KEY_FORMAT.match(data["key"])
    assert data["status"] == "new"
    assert data["createdBy"] == admin
    assert data["unlocksCapability"] == "TEACHER_QUIZ_CREATION"
    assert emulator.document(f"accessKeys/{data['key']}")["status"] == "new"
    activity = list(emulator.collection("userActivity").values())
    assert [a["action"] for a in activity] == ["create_access_key"]
    assert activity[0]["uid"] == admin


async def test_create_with_both_targets_is_validation_error(client: AsyncClient, admin) -> None:
    response = await client.post(
        "/api/v1/access-keys",
        json={**CAPABILITY_BODY, "cartToUnlock": {"subjects": ["s1"]}},
        headers=bearer(admin),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]


async def test_create_for_missing_order_returns_404(client: AsyncClient, admin) -> None:
    response = await client.post(
        "/api/v1/access-keys",
        json={**CAPABILITY_BODY, "orderId": "missing"},
        headers=bearer(admin),
    )
    assert response.status_code == 404
    assert response.json()["code"] == "ORDER_NOT_FOUND"


async def test_bulk_create(client: AsyncClient, admin, emulator) -> None:
    response = await client.post(
        "/api/v1/access-keys/bulk",
        json={"cartToUnlock": {"courses": ["c1"]}, "count": 3},
        headers=bearer(admin),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["count"] == 3
    assert len(data["keys"]) == 3
    assert set(emulator.collection("accessKeys")) == set(data["keys"])


async def test_bulk_count_above_cap_rejected(client: AsyncClient, admin) -> None:
    response = await client.post(
        "/api/v1/access-keys/bulk",
        json={**CAPABILITY_BODY, "count": 401},
        headers=bearer(admin),
    )
    assert response.status_code == 400


async def test_redeem_flow(client: AsyncClient, admin, student, emulator) -> None:
    created = await client.post("/api/v1/access-keys", json=CAPABILITY_BODY, headers=bearer(admin))
    key = created.json()["data"]["key"]

    first = await client.post(
        "/api/v1/access-keys/redeem", json={"key": f" {key.lower()} "}, headers=bearer(student)
    )
    second = await client.post(
        "/api/v1/access-keys/redeem", json={"key": key}, headers=bearer(student)
    )

    assert first.status_code == 200
    assert first.json()["data"]["canCreateQuizzes"] is True
    assert first.json()["message"] == "Quiz creation unlocked"
    assert second.status_code == 409
    assert second.json() == {
        "success": False,
        "code": "KEY_ALREADY_USED",
        "message": "This access key has already been used",
    }
    assert emulator.document(f"users/{student}")["canCreateQuizzes"] is True


async def test_redeem_unknown_key_returns_404(client: AsyncClient, student) -> None:
    response = await client.post(
        "/api/v1/access-keys/redeem", json={"key": "ZZZZ-ZZZZ-ZZZZ"}, headers=bearer(student)
    )
    assert response.status_code == 404
    assert response.json()["code"] == "KEY_NOT_FOUND"


async def test_vietnamese_messages(client: AsyncClient, student, monkeypatch) -> None:
    monkeypatch.setenv("ERROR_LOCALE", "vi")
    get_settings.cache_clear()
    response = await client.post(
        "/api/v1/access-keys/redeem", json={"key": "ZZZZ-ZZZZ-ZZZZ"}, headers=bearer(student)
    )
    assert response.json()["message"] == "Access key không tồn tại"


async def test_debug_mode_includes_details(client: AsyncClient, student, monkeypatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    get_settings.cache_clear()
    response = await client.post(
        "/api/v1/access-keys/redeem", json={"key": "ZZZZ-ZZZZ-ZZZZ"}, headers=bearer(student)
    )
    details = response.json()["details"]
    assert details["type"] == "KeyNotFoundException"
    assert details["context"]["resource_id"] == "ZZZZ-ZZZZ-ZZZZ"


async def test_activity_log_failure_does_not_fail_request(
    client: AsyncClient, student, emulator
) -> None:
    emulator.seed("accessKeys/KKKK-KKKK-KKKK", {"status": "new", "unlocksCapability": "X"})
    emulator.fail_next("commit", "UNAVAILABLE", status_code=503)

    response = await client.post(
        "/api/v1/access-keys/redeem", json={"key": "KKKK-KKKK-KKKK"}, headers=bearer(student)
    )

    assert response.status_code == 200
    assert emulator.document("accessKeys/KKKK-KKKK-KKKK")["status"] == "redeemed"
