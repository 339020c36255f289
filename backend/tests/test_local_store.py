"""Tests for the embedded SQLite record store."""

import asyncio
from datetime import datetime
from unittest.mock import patch

import pytest

from fileindex.exceptions import StoreError
from fileindex.schemas.files import FileCategory, FileRecord
from fileindex.store.local import LocalRecordStore


def _file(path: str, size: int = 10, category: FileCategory = FileCategory.OTHER, **kw) -> FileRecord:
    parent, _, name = path.rpartition("/")
    ext = "." + name.rsplit(".", 1)[1].lower() if "." in name else ""
    return FileRecord(
        name=name,
        path=path,
        extension=ext,
        size=size,
        category=category,
        parent_path=parent,
        modified_at=datetime(2024, 5, 1, 12, 0),
        **kw,
    )


def _folder(path: str) -> FileRecord:
    parent, _, name = path.rpartition("/")
    return FileRecord(name=name, path=path, is_directory=True, parent_path=parent)


class TestConnect:
    @pytest.mark.asyncio
    async def test_creates_database_file(self, tmp_path):
        db = tmp_path / "nested" / "dir" / "index.db"
        s = LocalRecordStore(db)
        assert s.is_connected is False
        await s.connect()
        try:
            assert s.is_connected is True
            assert db.exists()
            await s.connect()  # second connect is a no-op
        finally:
            await s.close()
        assert s.is_connected is False

    @pytest.mark.asyncio
    async def test_persists_across_reopen(self, tmp_path):
        db = tmp_path / "index.db"
        s = LocalRecordStore(db)
        await s.connect()
        await s.upsert_batch([_file("/data/a.txt")])
        await s.close()

        s2 = LocalRecordStore(db)
        await s2.connect()
        try:
            stats = await s2.get_stats()
            assert stats.total_files == 1
        finally:
            await s2.close()

    @pytest.mark.asyncio
    async def test_concurrent_first_use_shares_one_engine(self, tmp_path):
        s = LocalRecordStore(tmp_path / "index.db")
        try:
            with patch.object(s, "_create_engine", wraps=s._create_engine) as create:
                stats, _, comment = await asyncio.gather(
                    s.get_stats(), s.get_stats(), s.get_comment("/a"),
                )
            assert create.call_count == 1
            assert stats.total_files == 0
            assert comment is None
        finally:
            await s.close()

    @pytest.mark.asyncio
    async def test_session_without_engine_is_store_error(self, tmp_path):
        s = LocalRecordStore(tmp_path / "index.db")

        async def _noop(session):
            return None

        with pytest.raises(StoreError, match="not connected"):
            await s._execute(_noop)

    @pytest.mark.asyncio
    async def test_operation_after_close_reconnects(self, tmp_path):
        s = LocalRecordStore(tmp_path / "index.db")
        await s.connect()
        await s.close()
        try:
            assert (await s.get_stats()).total_files == 0
            assert s.is_connected
        finally:
            await s.close()


class TestUpsert:
    @pytest.mark.asyncio
    async def test_empty_batch(self, store):
        assert await store.upsert_batch([]) == 0

    @pytest.mark.asyncio
    async def test_idempotent_by_path(self, store):
        records = [_folder("/data/docs"), _file("/data/docs/a.txt"), _file("/data/docs/b.txt")]
        assert await store.upsert_batch(records) == 3
        assert await store.upsert_batch(records) == 3

        stats = await store.get_stats()
        assert stats.total_files == 2
        assert stats.total_folders == 1

    @pytest.mark.asyncio
    async def test_overwrites_existing_path(self, store):
        await store.upsert_batch([_file("/data/a.txt", size=10)])
        await store.upsert_batch([_file("/data/a.txt", size=999)])

        children = await store.list_children("/data")
        assert len(children) == 1
        assert children[0].size == 999

    @pytest.mark.asyncio
    async def test_duplicate_path_in_batch_last_wins(self, store):
        written = await store.upsert_batch([_file("/data/a.txt", size=1), _file("/data/a.txt", size=2)])
        assert written == 1
        children = await store.list_children("/data")
        assert [c.size for c in children] == [2]

    @pytest.mark.asyncio
    async def test_failed_batch_is_rolled_back(self, store):
        # Same primary key on two different paths -> constraint violation mid-batch
        bad = [_file("/data/a.txt", id="same"), _file("/data/b.txt", id="same")]
        with pytest.raises(StoreError):
            await store.upsert_batch(bad)

        stats = await store.get_stats()
        assert stats.total_files == 0

    @pytest.mark.asyncio
    async def test_round_trip_fields(self, store):
        rec = _file("/data/photos/Beach.JPG", size=4096, category=FileCategory.IMAGE)
        await store.upsert_batch([rec])

        [back] = await store.list_children("/data/photos")
        assert back.id == rec.id
        assert back.name == "Beach.JPG"
        assert back.extension == ".jpg"
        assert back.size == 4096
        assert back.category == FileCategory.IMAGE
        assert back.is_directory is False
        assert back.modified_at == datetime(2024, 5, 1, 12, 0)
        assert back.parent_path == "/data/photos"


class TestQueries:
    @pytest.mark.asyncio
    async def test_search_prefix_first(self, store):
        await store.upsert_batch([
            _file("/d/annual-report.docx"),
            _file("/d/report.pdf"),
            _file("/d/Reply.txt"),
            _file("/d/notes.txt"),
        ])
        names = [r.name for r in await store.search_by_name("rep")]
        assert names == ["Reply.txt", "report.pdf", "annual-report.docx"]

    @pytest.mark.asyncio
    async def test_search_report_ranking(self, store):
        await store.upsert_batch([
            _file("/d/expense_report.xlsx"),
            _file("/d/Report_Final.docx"),
            _file("/d/report.pdf"),
        ])
        names = [r.name for r in await store.search_by_name("report")]
        assert names == ["report.pdf", "Report_Final.docx", "expense_report.xlsx"]

    @pytest.mark.asyncio
    async def test_search_folds_non_ascii_case(self, store):
        await store.upsert_batch([_file("/d/Ärger.txt"), _file("/d/Übersicht Ärger.pdf")])

        assert [r.name for r in await store.search_by_name("ärger")] == ["Ärger.txt", "Übersicht Ärger.pdf"]
        assert [r.name for r in await store.search_by_name("ÜBER")] == ["Übersicht Ärger.pdf"]

    @pytest.mark.asyncio
    async def test_search_within_category(self, store):
        await store.upsert_batch([
            _file("/d/report.pdf", category=FileCategory.PDF),
            _file("/d/report.docx", category=FileCategory.DOCUMENT),
            _folder("/d/reports"),
        ])
        assert [r.name for r in await store.search_by_name("report", category="pdf")] == ["report.pdf"]
        assert [r.name for r in await store.search_by_name("report", category=FileCategory.OTHER)] == ["reports"]
        assert len(await store.search_by_name("report")) == 3

    @pytest.mark.asyncio
    async def test_search_limit_and_blank(self, store):
        await store.upsert_batch([_file(f"/d/file{i}.txt") for i in range(5)])
        assert len(await store.search_by_name("file", limit=2)) == 2
        assert await store.search_by_name("   ") == []

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, store):
        await store.upsert_batch([_file("/d/100% done.txt"), _file("/d/1000.txt"), _file("/d/a_b.txt"), _file("/d/axb.txt")])
        assert [r.name for r in await store.search_by_name("100%")] == ["100% done.txt"]
        assert [r.name for r in await store.search_by_name("a_b")] == ["a_b.txt"]

    @pytest.mark.asyncio
    async def test_children_folders_first(self, store):
        await store.upsert_batch([
            _file("/root/b.txt"),
            _folder("/root/zeta"),
            _file("/root/A.txt"),
            _folder("/root/alpha"),
            _file("/root/alpha/deeper.txt"),
        ])
        names = [r.name for r in await store.list_children("/root")]
        assert names == ["alpha", "zeta", "A.txt", "b.txt"]
        assert await store.list_children("/nowhere") == []

    @pytest.mark.asyncio
    async def test_by_category_excludes_folders(self, store):
        await store.upsert_batch([
            _folder("/p/images"),
            _file("/p/b.jpg", category=FileCategory.IMAGE),
            _file("/p/a.png", category=FileCategory.IMAGE),
            _file("/p/c.pdf", category=FileCategory.PDF),
        ])
        images = await store.list_by_category("image")
        assert [r.name for r in images] == ["a.png", "b.jpg"]
        assert await store.list_by_category(FileCategory.VIDEO) == []

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, store):
        with pytest.raises(ValueError):
            await store.list_by_category("spaceship")


class TestScanHistory:
    @pytest.mark.asyncio
    async def test_never_scanned(self, store):
        stats = await store.get_stats()
        assert stats.total_files == 0
        assert stats.total_folders == 0
        assert stats.last_scan is None
        assert stats.by_category == {}

    @pytest.mark.asyncio
    async def test_counts_per_category(self, store):
        await store.upsert_batch([
            _folder("/p/images"),
            _file("/p/images/a.jpg", category=FileCategory.IMAGE),
            _file("/p/images/b.png", category=FileCategory.IMAGE),
            _file("/p/c.pdf", category=FileCategory.PDF),
            _file("/p/notes"),
        ])
        stats = await store.get_stats()
        assert stats.by_category == {"image": 2, "pdf": 1, "other": 1}
        assert sum(stats.by_category.values()) == stats.total_files

    @pytest.mark.asyncio
    async def test_clear_keeps_history_and_comments(self, store):
        await store.upsert_batch([_folder("/d/sub"), _file("/d/sub/a.txt")])
        await store.record_scan("/d", total_files=1, total_folders=1, duration_ms=12)
        await store.set_comment("/d/sub/a.txt", "keep me")

        assert await store.clear() == 2

        stats = await store.get_stats()
        assert stats.total_files == 0
        assert stats.total_folders == 0
        assert stats.last_scan is not None
        assert await store.get_comment("/d/sub/a.txt") == "keep me"


class TestComments:
    @pytest.mark.asyncio
    async def test_set_get_update_delete(self, store):
        assert await store.get_comment("/x") is None

        await store.set_comment("/x", "first")
        assert await store.get_comment("/x") == "first"

        await store.set_comment("/x", "second")
        assert await store.get_comment("/x") == "second"

        await store.delete_comment("/x")
        assert await store.get_comment("/x") is None

    @pytest.mark.asyncio
    async def test_blank_comment_removes(self, store):
        await store.set_comment("/x", "note")
        await store.set_comment("/x", "   ")
        assert await store.get_comment("/x") is None

    @pytest.mark.asyncio
    async def test_comment_on_unindexed_path(self, store):
        await store.set_comment("/not/indexed.txt", "still allowed")
        assert await store.get_comment("/not/indexed.txt") == "still allowed"
