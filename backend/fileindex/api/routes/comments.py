"""Per-path comment routes."""

from fastapi import APIRouter, Depends

from fileindex.api.deps import get_store
from fileindex.schemas.comments import CommentBody, CommentResponse
from fileindex.store.base import RecordStore

router = APIRouter()


@router.get("", response_model=CommentResponse)
async def get_comment(path: str, store: RecordStore = Depends(get_store)):
    return CommentResponse(path=path, comment=await store.get_comment(path))


@router.put("", response_model=CommentResponse)
async def set_comment(body: CommentBody, store: RecordStore = Depends(get_store)):
    """Empty text removes the comment."""
    await store.set_comment(body.path, body.comment)
    return CommentResponse(path=body.path, comment=await store.get_comment(body.path))


@router.delete("")
async def delete_comment(path: str, store: RecordStore = Depends(get_store)):
    await store.delete_comment(path)
    return {"deleted": True}
