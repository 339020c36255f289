"""Indexed filesystem entry — one row per file or folder seen during a scan."""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fileindex.models.base import Base


class FileEntry(Base):
    __tablename__ = "files"
    __table_args__ = (
        Index("idx_files_name", "name"),
        Index("idx_files_category", "category"),
        Index("idx_files_parent", "parent_path"),
        Index("idx_files_extension", "extension"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    path: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    extension: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="other", nullable=False)
    is_directory: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    accessed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    parent_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    indexed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<FileEntry(id={self.id}, path='{self.path}')>"
