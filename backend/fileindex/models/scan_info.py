"""Scan history — one append-only row per completed scan."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from fileindex.models.base import Base


class ScanInfo(Base):
    __tablename__ = "scan_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    root_path: Mapped[str] = mapped_column(Text, nullable=False)
    total_files: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_folders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scan_duration_ms: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_scan: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<ScanInfo(id={self.id}, root='{self.root_path}')>"
