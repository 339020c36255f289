"""Record store contract and the SQLAlchemy implementation both backends share."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from sqlalchemy import case, delete, func, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from fileindex.database import init_schema
from fileindex.exceptions import StoreError
from fileindex.models import FileComment, FileEntry, ScanInfo
from fileindex.schemas.files import FileCategory, FileRecord, IndexStats

logger = logging.getLogger(__name__)

T = TypeVar("T")

_files = FileEntry.__table__

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_ON_CONFLICT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_row(record: FileRecord, indexed_at: datetime) -> dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "path": record.path,
        "extension": record.extension,
        "size": record.size or 0,
        "category": FileCategory(record.category).value,
        "is_directory": record.is_directory,
        "created_at": record.created_at,
        "modified_at": record.modified_at,
        "accessed_at": record.accessed_at,
        "parent_path": record.parent_path,
        "indexed_at": indexed_at,
    }


class RecordStore(ABC):
    """Backend-agnostic persistence for FileRecords, scan history and comments."""

    backend: str = "abstract"

    @property
    @abstractmethod
    def is_connected(self) -> bool: ...

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    async def upsert_batch(self, records: Iterable[FileRecord]) -> int:
        """Insert or overwrite by path, all-or-nothing. Returns rows written."""

    @abstractmethod
    async def search_by_name(
        self, query: str, limit: int = 100, category: FileCategory | str | None = None
    ) -> list[FileRecord]:
        """Case-insensitive name containment, prefix matches first."""

    @abstractmethod
    async def list_children(self, parent_path: str) -> list[FileRecord]: ...

    @abstractmethod
    async def list_by_category(self, category: FileCategory | str) -> list[FileRecord]: ...

    @abstractmethod
    async def get_stats(self) -> IndexStats: ...

    @abstractmethod
    async def record_scan(
        self, root_path: str, total_files: int, total_folders: int, duration_ms: int
    ) -> None: ...

    @abstractmethod
    async def clear(self) -> int:
        """Delete every indexed file row. Scan history and comments stay."""

    @abstractmethod
    async def get_comment(self, path: str) -> str | None: ...

    @abstractmethod
    async def set_comment(self, path: str, comment: str) -> None:
        """Upsert by path; empty text deletes the comment."""

    @abstractmethod
    async def delete_comment(self, path: str) -> None: ...


class SqlRecordStore(RecordStore):
    """RecordStore over an async SQLAlchemy engine.

    Subclasses provide the engine; every operation runs in its own session
    and transaction through ``_run``.
    """

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        # Guards engine creation and swaps; operations themselves run unlocked
        self._lock = asyncio.Lock()

    @abstractmethod
    def _create_engine(self) -> AsyncEngine: ...

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """Open the engine and create the schema if absent. No-op when connected.

        Concurrent callers share one engine: only the first to take the lock
        builds it, the rest find it in place.
        """
        if self._engine is not None:
            return
        async with self._lock:
            if self._engine is not None:
                return
            self._install(await self._open_engine())
            logger.info("%s record store connected", self.backend)

    async def close(self) -> None:
        async with self._lock:
            if self._engine is None:
                return
            engine = self._engine
            self._engine = None
            self._session_factory = None
            await engine.dispose()
            logger.info("%s record store closed", self.backend)

    async def _open_engine(self) -> AsyncEngine:
        """New engine with the schema in place. Disposed again if that fails."""
        engine = self._create_engine()
        try:
            await init_schema(engine)
        except BaseException:
            await engine.dispose()
            raise
        return engine

    def _install(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    async def _execute(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        factory = self._session_factory
        if factory is None:
            raise StoreError(f"{self.backend} store is not connected")
        async with factory() as session:
            async with session.begin():
                return await operation(session)

    async def _run(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        try:
            await self.connect()
            return await self._execute(operation)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"{self.backend} store operation failed: {e}") from e

    # --- files ---

    async def upsert_batch(self, records: Iterable[FileRecord]) -> int:
        indexed_at = _utcnow()
        # Last occurrence of a path wins inside one batch
        rows = {r.path: _to_row(r, indexed_at) for r in records}
        if not rows:
            return 0
        payload = list(rows.values())

        async def _op(session: AsyncSession) -> None:
            await self._upsert_rows(session, payload)

        await self._run(_op)
        logger.debug("Upserted %d records into %s store", len(payload), self.backend)
        return len(payload)

    async def _upsert_rows(self, session: AsyncSession, rows: list[dict[str, Any]]) -> None:
        dialect_insert = _ON_CONFLICT_DIALECTS.get(session.bind.dialect.name)
        if dialect_insert is None:
            await self._replace_rows(session, rows)
            return

        stmt = dialect_insert(_files)
        stmt = stmt.on_conflict_do_update(
            index_elements=[_files.c.path],
            set_={c.name: stmt.excluded[c.name] for c in _files.columns if c.name != "path"},
        )
        await session.execute(stmt, rows)

    async def _replace_rows(self, session: AsyncSession, rows: list[dict[str, Any]]) -> None:
        """Portable upsert: delete existing paths, then insert, in one transaction."""
        paths = [row["path"] for row in rows]
        await session.execute(delete(_files).where(_files.c.path.in_(paths)))
        await session.execute(insert(_files), rows)

    async def search_by_name(
        self, query: str, limit: int = 100, category: FileCategory | str | None = None
    ) -> list[FileRecord]:
        query = query.strip()
        if not query or limit <= 0:
            return []

        prefix_first = case((FileEntry.name.istartswith(query, autoescape=True), 0), else_=1)
        stmt = select(FileEntry).where(FileEntry.name.icontains(query, autoescape=True))
        if category is not None:
            stmt = stmt.where(FileEntry.category == FileCategory(category).value)
        stmt = stmt.order_by(prefix_first, func.lower(FileEntry.name), FileEntry.name).limit(limit)
        return await self._fetch_records(stmt)

    async def list_children(self, parent_path: str) -> list[FileRecord]:
        stmt = (
            select(FileEntry)
            .where(FileEntry.parent_path == parent_path)
            .order_by(FileEntry.is_directory.desc(), func.lower(FileEntry.name), FileEntry.name)
        )
        return await self._fetch_records(stmt)

    async def list_by_category(self, category: FileCategory | str) -> list[FileRecord]:
        stmt = (
            select(FileEntry)
            .where(
                FileEntry.category == FileCategory(category).value,
                FileEntry.is_directory.is_(False),
            )
            .order_by(func.lower(FileEntry.name), FileEntry.name)
        )
        return await self._fetch_records(stmt)

    async def _fetch_records(self, stmt) -> list[FileRecord]:
        async def _op(session: AsyncSession) -> list[FileRecord]:
            result = await session.execute(stmt)
            return [FileRecord.model_validate(row) for row in result.scalars().all()]

        return await self._run(_op)

    async def get_stats(self) -> IndexStats:
        async def _op(session: AsyncSession) -> IndexStats:
            total_files = await session.scalar(
                select(func.count()).select_from(FileEntry).where(FileEntry.is_directory.is_(False))
            )
            total_folders = await session.scalar(
                select(func.count()).select_from(FileEntry).where(FileEntry.is_directory.is_(True))
            )
            last_scan = await session.scalar(
                select(ScanInfo.last_scan).order_by(ScanInfo.id.desc()).limit(1)
            )
            per_category = await session.execute(
                select(FileEntry.category, func.count())
                .where(FileEntry.is_directory.is_(False))
                .group_by(FileEntry.category)
            )
            return IndexStats(
                total_files=total_files or 0,
                total_folders=total_folders or 0,
                last_scan=last_scan,
                by_category={cat or FileCategory.OTHER.value: n for cat, n in per_category.all()},
            )

        return await self._run(_op)

    async def record_scan(
        self, root_path: str, total_files: int, total_folders: int, duration_ms: int
    ) -> None:
        async def _op(session: AsyncSession) -> None:
            session.add(ScanInfo(
                root_path=root_path,
                total_files=total_files,
                total_folders=total_folders,
                scan_duration_ms=duration_ms,
                last_scan=_utcnow(),
            ))

        await self._run(_op)

    async def clear(self) -> int:
        async def _op(session: AsyncSession) -> int:
            result = await session.execute(delete(FileEntry))
            return result.rowcount or 0

        deleted = await self._run(_op)
        logger.info("Cleared %d indexed entries from %s store", deleted, self.backend)
        return deleted

    # --- comments ---

    async def get_comment(self, path: str) -> str | None:
        async def _op(session: AsyncSession) -> str | None:
            return await session.scalar(
                select(FileComment.comment).where(FileComment.file_path == path)
            )

        return await self._run(_op) or None

    async def set_comment(self, path: str, comment: str) -> None:
        if not comment or not comment.strip():
            await self.delete_comment(path)
            return

        async def _op(session: AsyncSession) -> None:
            existing = await session.scalar(
                select(FileComment).where(FileComment.file_path == path)
            )
            if existing:
                existing.comment = comment
                existing.updated_at = _utcnow()
            else:
                session.add(FileComment(file_path=path, comment=comment, updated_at=_utcnow()))

        await self._run(_op)

    async def delete_comment(self, path: str) -> None:
        async def _op(session: AsyncSession) -> None:
            await session.execute(delete(FileComment).where(FileComment.file_path == path))

        await self._run(_op)
