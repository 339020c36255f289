"""Index routes — scan, progress stream, indexed queries, stats."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from fileindex.api.deps import get_index, get_progress, get_search
from fileindex.exceptions import InvalidScanRootError, ScanInProgressError
from fileindex.schemas.files import (
    FileCategory,
    FileRecord,
    IndexStats,
    ScanRequest,
    ScanResult,
    ScanStatus,
)
from fileindex.schemas.search import SearchHit
from fileindex.services.index_service import IndexService
from fileindex.services.progress import ProgressBroadcaster
from fileindex.services.search_service import SearchService

logger = logging.getLogger(__name__)
router = APIRouter()

KEEPALIVE_SECONDS = 15


@router.post("/scan", response_model=ScanResult)
async def scan(
    body: ScanRequest,
    index: IndexService = Depends(get_index),
    progress: ProgressBroadcaster = Depends(get_progress),
):
    """Full re-index of root_path. Progress is pushed on /index/progress."""
    try:
        return await index.scan_and_index(body.root_path, on_progress=progress.publish)
    except ScanInProgressError as e:
        raise HTTPException(409, str(e))
    except InvalidScanRootError as e:
        raise HTTPException(400, str(e))


@router.get("/progress")
async def scan_progress(request: Request, progress: ProgressBroadcaster = Depends(get_progress)):
    """Server-sent events: one `progress` event per processed entry."""

    async def _events():
        async with progress.subscribe() as queue:
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield f"event: progress\ndata: {event.model_dump_json()}\n\n"

    return StreamingResponse(
        _events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/status", response_model=ScanStatus)
async def scan_status(index: IndexService = Depends(get_index)):
    return ScanStatus(is_scanning=index.is_scanning)


@router.get("/search", response_model=list[SearchHit])
async def search_index(
    q: str = Query(..., min_length=1),
    limit: int | None = Query(None, ge=1, le=1000),
    category: FileCategory | None = None,
    search: SearchService = Depends(get_search),
):
    """Name search in the index — prefix matches first, optionally one category."""
    return await search.search_indexed(q, limit, category)


@router.get("/children", response_model=list[FileRecord])
async def list_children(parent_path: str, index: IndexService = Depends(get_index)):
    return await index.get_indexed_files(parent_path)


@router.get("/category/{category}", response_model=list[FileRecord])
async def list_by_category(category: FileCategory, index: IndexService = Depends(get_index)):
    return await index.get_files_by_category(category)


@router.get("/stats", response_model=IndexStats)
async def index_stats(index: IndexService = Depends(get_index)):
    return await index.get_stats()


@router.delete("")
async def clear_index(index: IndexService = Depends(get_index)):
    try:
        deleted = await index.clear_index()
    except ScanInProgressError as e:
        raise HTTPException(409, str(e))
    return {"deleted": deleted}
