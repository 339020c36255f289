"""File index schemas — records, scan results, progress and stats."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FileCategory(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    PDF = "pdf"
    CAD = "cad"
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    ARCHIVE = "archive"
    OTHER = "other"


class FileRecord(BaseModel):
    """One filesystem entry (file or folder) as indexed and returned."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    path: str
    extension: str = ""
    size: int = 0
    category: FileCategory = FileCategory.OTHER
    is_directory: bool = False
    created_at: datetime | None = None
    modified_at: datetime | None = None
    accessed_at: datetime | None = None
    parent_path: str | None = None


class ScanRequest(BaseModel):
    root_path: str


class ScanResult(BaseModel):
    """Totals reported by a completed scan."""
    total_files: int
    total_folders: int
    duration_ms: int


class ScanProgress(BaseModel):
    """Pushed after every processed entry."""
    current_path: str
    count: int


class ScanStatus(BaseModel):
    is_scanning: bool


class IndexStats(BaseModel):
    total_files: int
    total_folders: int
    last_scan: datetime | None = None  # None = never scanned
    by_category: dict[str, int] = {}  # non-directory counts
