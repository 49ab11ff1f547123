"""FirestoreRESTClient error mapping against the emulator and raw transports."""

import httpx
import pytest

from app.domain.exceptions import ValidationException
from app.infrastructure.exceptions import DocumentExistsError, FirestoreException
from app.infrastructure.firebase import FirestoreRESTClient, is_retryable_error


def _client(handler) -> FirestoreRESTClient:
    return FirestoreRESTClient(
        "test-project",
        None,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        base_url="http://emulator/v1",
    )


async def test_get_missing_document_returns_none(db) -> None:
    assert await db.collection("users").document("nobody").get() is None


async def test_set_then_get(db) -> None:
    ref = db.collection("users").document("u1")
    await ref.set({"role": "teacher"})
    snap = await ref.get()
    assert snap.id == "u1"
    assert snap.to_dict() == {"role": "teacher"}


def test_auto_id_documents_are_unique(db) -> None:
    refs = {db.collection("orders").document().id for _ in range(50)}
    assert len(refs) == 50


async def test_already_exists_maps_to_document_exists_error(db, emulator) -> None:
    emulator.seed("users/u1", {})
    txn = await db.begin_transaction()
    txn.create(db.collection("users").document("u1"), {"role": "x"})
    with pytest.raises(DocumentExistsError):
        await txn.commit()


async def test_error_without_status_uses_http_code() -> None:
    client = _client(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(FirestoreException) as exc_info:
        await client.commit([])
    assert exc_info.value.code == "UNAVAILABLE"
    assert exc_info.value.http_status == 503


async def test_timeout_maps_to_deadline_exceeded() -> None:
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(FirestoreException) as exc_info:
        await _client(handler).collection("users").document("u1").get()
    assert exc_info.value.code == "DEADLINE_EXCEEDED"
    assert is_retryable_error(exc_info.value)


async def test_connection_error_maps_to_unavailable() -> None:
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(FirestoreException) as exc_info:
        await _client(handler).begin_transaction()
    assert exc_info.value.code == "UNAVAILABLE"
    assert not is_retryable_error(exc_info.value)


async def test_rollback_after_commit_is_noop(db, emulator) -> None:
    txn = await db.begin_transaction()
    await txn.commit()
    await txn.rollback()
    assert emulator.calls("rollback") == []


async def test_document_id_with_slash_rejected(db) -> None:
    with pytest.raises(ValidationException):
        db.collection("subjects").document("s1/quizzes/q1")


async def test_document_without_id_gets_generated_id(db) -> None:
    ref = db.collection("orders").document()
    assert ref.id
    assert "/" not in ref.id
