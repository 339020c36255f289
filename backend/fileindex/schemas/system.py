"""System schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    service: str = "fileindex"
    store_backend: str
    store_connected: bool = False
