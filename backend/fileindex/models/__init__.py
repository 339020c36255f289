"""SQLAlchemy ORM models for the file index."""

from fileindex.models.base import Base
from fileindex.models.file_comment import FileComment
from fileindex.models.file_entry import FileEntry
from fileindex.models.scan_info import ScanInfo

__all__ = [
    "Base",
    "FileComment",
    "FileEntry",
    "ScanInfo",
]
