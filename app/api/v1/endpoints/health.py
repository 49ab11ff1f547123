"""Health check endpoint. No auth; used for liveness probes."""

from fastapi import APIRouter

from app.infrastructure.firebase.client import get_firestore_client
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok plus whether Firestore is configured (no store round-trip)."""
    return HealthResponse(firestore=get_firestore_client() is not None)
