"""Search schemas — ranked hits, match spans and filter criteria."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from fileindex.schemas.files import FileCategory, FileRecord


class FieldMatch(BaseModel):
    """Where the query matched inside one record field."""
    key: str
    value: str
    indices: list[tuple[int, int]] = []  # inclusive [start, end] spans


class SearchHit(BaseModel):
    file: FileRecord
    score: float  # lower = better
    matches: list[FieldMatch] | None = None


class SearchFilters(BaseModel):
    categories: list[FileCategory] = []
    extensions: list[str] = []
    min_size: int | None = None
    max_size: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    folder: str | None = None


class FuzzySearchRequest(BaseModel):
    query: str
    files: list[FileRecord]
    threshold: float | None = Field(default=None, gt=0.0, le=1.0)
    filters: SearchFilters | None = None


class FilterRequest(BaseModel):
    files: list[FileRecord]
    filters: SearchFilters
