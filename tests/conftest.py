"""Pytest configuration and fixtures for the e-learning API.

Store-backed tests run against an in-memory Firestore REST emulator
(tests/fakes/firestore_emulator.py) through httpx.MockTransport, so no
network or credentials are needed. HTTP tests use app.main:app with the
Firestore client, transaction runner, cache and token verifier overridden.
"""

import os

# Settings are validated when app.main is imported; point them at an emulator.
os.environ.setdefault("FIRESTORE_EMULATOR_HOST", "localhost:8080")
os.environ.setdefault("FIREBASE_PROJECT_ID", "test-project")

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.api.v1.dependencies import (  # noqa: E402
    get_cache,
    get_db,
    get_token_verifier,
    get_transaction_runner,
)
from app.core.config import get_settings  # noqa: E402
from app.core.limiter import limiter  # noqa: E402
from app.infrastructure.cache import MemoryCache  # noqa: E402
from app.infrastructure.firebase import FirestoreRESTClient, TransactionRunner  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from tests.fakes.auth import FakeTokenVerifier  # noqa: E402
from tests.fakes.firestore_emulator import FirestoreEmulator  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_state():
    """Fresh settings cache and rate-limit counters for every test."""
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()


@pytest.fixture
def emulator() -> FirestoreEmulator:
    return FirestoreEmulator()


@pytest.fixture
async def db(emulator: FirestoreEmulator):
    """FirestoreRESTClient wired to the in-memory emulator."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(emulator.handler))
    client = FirestoreRESTClient(
        "test-project",
        None,
        http_client=http_client,
        base_url="http://emulator/v1",
    )
    yield client
    await http_client.aclose()


@pytest.fixture
def sleeps() -> list[float]:
    """Backoff delays (seconds) requested by the runner fixture."""
    return []


@pytest.fixture
def runner(db: FirestoreRESTClient, sleeps: list[float]) -> TransactionRunner:
    """TransactionRunner that records backoff instead of sleeping."""

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return TransactionRunner(db, sleep=fake_sleep)


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
async def client(db, runner, cache) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) backed by the emulator."""
    fastapi_app.dependency_overrides[get_db] = lambda: db
    fastapi_app.dependency_overrides[get_transaction_runner] = lambda: runner
    fastapi_app.dependency_overrides[get_cache] = lambda: cache
    fastapi_app.dependency_overrides[get_token_verifier] = FakeTokenVerifier
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def admin(emulator: FirestoreEmulator) -> str:
    """Seed an admin user and return its uid."""
    emulator.seed("users/admin-1", {"role": "admin", "email": "admin@example.com"})
    return "admin-1"


@pytest.fixture
def student(emulator: FirestoreEmulator) -> str:
    """Seed a student user (no stored role) and return its uid."""
    emulator.seed("users/student-1", {"email": "student@example.com"})
    return "student-1"
