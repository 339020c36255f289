"""Directory walker — depth-first enumeration of a subtree into FileRecords."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from datetime import datetime, timezone
from typing import AsyncIterator

from fileindex.schemas.files import FileCategory, FileRecord
from fileindex.utils.categories import get_file_category

logger = logging.getLogger(__name__)


def _utc(ts: float | None) -> datetime | None:
    """POSIX timestamp -> naive UTC datetime (what the store persists)."""
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)


def build_record(path: str, name: str, parent_path: str, st: os.stat_result) -> FileRecord:
    """Classify a stat result into a FileRecord."""
    is_dir = stat.S_ISDIR(st.st_mode)
    extension = "" if is_dir else os.path.splitext(name)[1].lower()
    # st_birthtime only exists on macOS/BSD (and Windows on 3.12+)
    created = getattr(st, "st_birthtime", None) or st.st_ctime

    return FileRecord(
        name=name,
        path=path,
        extension=extension,
        size=0 if is_dir else st.st_size,
        category=FileCategory.OTHER if is_dir else get_file_category(extension),
        is_directory=is_dir,
        created_at=_utc(created),
        modified_at=_utc(st.st_mtime),
        accessed_at=_utc(st.st_atime),
        parent_path=parent_path,
    )


class DirectoryWalker:
    """Walks a subtree with an explicit stack instead of recursion.

    All entries of a directory are yielded (folders first, then files, by
    name) before the walk descends into that directory's first sub-folder.
    Unreadable entries are skipped; unlistable directories are abandoned.
    """

    def __init__(self, follow_symlinks: bool = False):
        self.follow_symlinks = follow_symlinks
        self.skipped_entries = 0
        self.skipped_dirs = 0

    async def walk(self, root: str) -> AsyncIterator[FileRecord]:
        self.skipped_entries = 0
        self.skipped_dirs = 0

        stack = [os.path.abspath(root)]
        while stack:
            current = stack.pop()
            try:
                entries = await asyncio.to_thread(self._scan_directory, current)
            except OSError as e:
                self.skipped_dirs += 1
                logger.warning("Cannot list %s, skipping subtree: %s", current, e)
                continue

            children: list[str] = []
            for record, descend in entries:
                yield record
                if descend:
                    children.append(record.path)

            # Reversed so the first folder by name is walked next
            for child in reversed(children):
                stack.append(child)

    def _scan_directory(self, directory: str) -> list[tuple[FileRecord, bool]]:
        """List and stat one directory. Runs in a worker thread."""
        with os.scandir(directory) as it:
            dir_entries = list(it)

        results: list[tuple[FileRecord, bool]] = []
        for entry in dir_entries:
            try:
                st = entry.stat(follow_symlinks=True)
                is_link = entry.is_symlink()
            except OSError as e:
                self.skipped_entries += 1
                logger.warning("Cannot access %s: %s", entry.path, e)
                continue

            record = build_record(entry.path, entry.name, directory, st)
            descend = record.is_directory and (self.follow_symlinks or not is_link)
            results.append((record, descend))

        results.sort(key=lambda r: (not r[0].is_directory, r[0].name.casefold(), r[0].name))
        return results
