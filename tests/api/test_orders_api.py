"""POST /orders: authenticated callers create pending orders."""

from httpx import AsyncClient

from tests.fakes.auth import bearer


async def test_create_order(client: AsyncClient, student, emulator) -> None:
    emulator.seed("subjects/s1", {"quizIds": ["q1", "q2", "q3"]})

    response = await client.post(
        "/api/v1/orders",
        json={"cart": {"subjects": ["s1"]}, "paymentMethod": "bank_transfer", "amount": 150000},
        headers=bearer(student),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["quizCount"] == 3
    assert data["estimatedValue"] == 150000
    assert data["paymentMethod"] == "bank_transfer"
    order = emulator.document(f"orders/{data['orderId']}")
    assert order["userId"] == student
    assert order["userEmail"] == f"{student}@example.com"
    actions = sorted(a["action"] for a in emulator.collection("userActivity").values())
    assert actions == ["create_order", "order_created"]


async def test_order_with_unknown_items_rejected(client: AsyncClient, student, emulator) -> None:
    response = await client.post(
        "/api/v1/orders", json={"cart": {"courses": ["nope"]}}, headers=bearer(student)
    )
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["message"] == "Cart contains unknown items"
    assert emulator.collection("orders") == {}


async def test_empty_cart_rejected(client: AsyncClient, student) -> None:
    response = await client.post(
        "/api/v1/orders", json={"cart": {"subjects": [], "courses": []}}, headers=bearer(student)
    )
    assert response.status_code == 400


async def test_order_requires_authentication(client: AsyncClient) -> None:
    response = await client.post("/api/v1/orders", json={"cart": {"subjects": ["s1"]}})
    assert response.status_code == 401


async def test_store_outage_returns_503_without_internal_detail(
    client: AsyncClient, student, emulator
) -> None:
    emulator.seed("subjects/s1", {"quizIds": ["q1"]})
    emulator.fail_next("beginTransaction", "UNAVAILABLE", "backend 10.0.0.7 down", status_code=503)

    response = await client.post(
        "/api/v1/orders", json={"cart": {"subjects": ["s1"]}}, headers=bearer(student)
    )

    assert response.status_code == 503
    body = response.json()
    assert body["code"] == "UNAVAILABLE"
    assert "10.0.0.7" not in response.text
