"""Health check."""

from fastapi import APIRouter, Depends

from fileindex import __version__
from fileindex.api.deps import get_store
from fileindex.schemas.system import HealthResponse
from fileindex.store.base import RecordStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(store: RecordStore = Depends(get_store)):
    """Lightweight liveness check, reports which store backend is active."""
    return HealthResponse(
        version=__version__,
        store_backend=store.backend,
        store_connected=store.is_connected,
    )


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
