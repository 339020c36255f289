"""Embedded single-process store: one SQLite file accessed through aiosqlite."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine

from fileindex.database import create_local_engine
from fileindex.store.base import SqlRecordStore


class LocalRecordStore(SqlRecordStore):
    backend = "local"

    def __init__(self, database_path: str | Path, echo: bool = False):
        super().__init__()
        self.database_path = Path(database_path)
        self._echo = echo

    def _create_engine(self) -> AsyncEngine:
        return create_local_engine(self.database_path, echo=self._echo)
