"""API route registration."""

from fastapi import APIRouter

from fileindex.api.routes import comments, health, index, search

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(index.router, prefix="/index", tags=["index"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
