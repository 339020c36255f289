"""Indexing coordinator — exclusive full-subtree scans into the record store."""

from __future__ import annotations

import inspect
import logging
import os
import time
from enum import Enum
from typing import Awaitable, Callable, Union

from fileindex.exceptions import InvalidScanRootError, ScanInProgressError
from fileindex.schemas.files import FileCategory, FileRecord, IndexStats, ScanProgress, ScanResult
from fileindex.services.walker import DirectoryWalker
from fileindex.store.base import RecordStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ScanProgress], Union[None, Awaitable[None]]]

DEFAULT_BATCH_SIZE = 500


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"


class IndexService:
    """Drives the walker, batches records into the store, reports progress.

    Only one scan runs at a time per instance. Every scan clears the store
    first (full re-index, no diffing).
    """

    def __init__(
        self,
        store: RecordStore,
        batch_size: int = DEFAULT_BATCH_SIZE,
        follow_symlinks: bool = False,
        walker_factory: Callable[[], DirectoryWalker] | None = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._store = store
        self._batch_size = batch_size
        self._walker_factory = walker_factory or (lambda: DirectoryWalker(follow_symlinks))
        self._state = ScanState.IDLE

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._state == ScanState.SCANNING

    async def scan_and_index(
        self, root_path: str, on_progress: ProgressCallback | None = None
    ) -> ScanResult:
        """Re-index everything below root_path.

        Raises ScanInProgressError without touching the running scan, and
        InvalidScanRootError before anything is cleared. Store failures
        propagate; batches flushed before the failure stay persisted.
        """
        # No await between the check and the transition
        if self._state == ScanState.SCANNING:
            raise ScanInProgressError()

        root = os.path.abspath(root_path)
        if not os.path.isdir(root):
            raise InvalidScanRootError(f"Not a directory: {root_path}")

        self._state = ScanState.SCANNING
        start = time.monotonic()
        logger.info("Scan started: %s", root)

        total_files = 0
        total_folders = 0
        batch: list[FileRecord] = []

        try:
            await self._store.clear()

            walker = self._walker_factory()
            async for record in walker.walk(root):
                if record.is_directory:
                    total_folders += 1
                else:
                    total_files += 1

                if on_progress is not None:
                    result = on_progress(ScanProgress(current_path=record.path, count=total_files + total_folders))
                    if inspect.isawaitable(result):
                        await result

                batch.append(record)
                if len(batch) >= self._batch_size:
                    await self._store.upsert_batch(batch)
                    batch = []

            if batch:
                await self._store.upsert_batch(batch)
                batch = []

            duration_ms = int((time.monotonic() - start) * 1000)
            await self._store.record_scan(root, total_files, total_folders, duration_ms)

            if walker.skipped_entries or walker.skipped_dirs:
                logger.warning(
                    "Scan of %s skipped %d entries and %d directories",
                    root, walker.skipped_entries, walker.skipped_dirs,
                )
            logger.info(
                "Scan finished: %s (%d files, %d folders in %d ms)",
                root, total_files, total_folders, duration_ms,
            )
            return ScanResult(
                total_files=total_files,
                total_folders=total_folders,
                duration_ms=duration_ms,
            )
        except Exception:
            logger.exception("Scan of %s failed after %d entries", root, total_files + total_folders)
            raise
        finally:
            self._state = ScanState.IDLE

    # --- read-through helpers used by the API layer ---

    async def search_indexed(
        self, query: str, limit: int = 100, category: FileCategory | str | None = None
    ) -> list[FileRecord]:
        return await self._store.search_by_name(query, limit, category)

    async def get_indexed_files(self, parent_path: str) -> list[FileRecord]:
        return await self._store.list_children(parent_path)

    async def get_files_by_category(self, category: FileCategory | str) -> list[FileRecord]:
        return await self._store.list_by_category(category)

    async def get_stats(self) -> IndexStats:
        return await self._store.get_stats()

    async def clear_index(self) -> int:
        if self.is_scanning:
            raise ScanInProgressError("Cannot clear the index while a scan is running")
        return await self._store.clear()
