"""Comment schemas."""

from pydantic import BaseModel


class CommentBody(BaseModel):
    path: str
    comment: str


class CommentResponse(BaseModel):
    path: str
    comment: str | None = None
