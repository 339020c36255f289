"""Test fixtures — temp SQLite record store, services and FastAPI test client."""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fileindex.api.deps import get_index, get_progress, get_search, get_store
from fileindex.main import create_app
from fileindex.services.index_service import IndexService
from fileindex.services.progress import ProgressBroadcaster
from fileindex.services.search_service import SearchService
from fileindex.store.local import LocalRecordStore


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    """Connected local store backed by a temp SQLite file."""
    s = LocalRecordStore(tmp_path / "db" / "file-index.db")
    await s.connect()
    yield s
    await s.close()


@pytest.fixture
def index_service(store):
    return IndexService(store, batch_size=500)


@pytest.fixture
def search_service(store):
    return SearchService(store)


@pytest.fixture
def progress():
    return ProgressBroadcaster(queue_size=100)


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """root/ with 2 folders and 3 files (2 .jpg, 1 .pdf)."""
    root = tmp_path / "share"
    (root / "photos").mkdir(parents=True)
    (root / "reports").mkdir()
    (root / "photos" / "beach.jpg").write_bytes(b"\xff\xd8" + b"0" * 100)
    (root / "photos" / "Mountain.JPG").write_bytes(b"\xff\xd8" + b"0" * 50)
    (root / "reports" / "report.pdf").write_bytes(b"%PDF-1.4" + b"0" * 10)
    return root


@pytest_asyncio.fixture
async def client(store, index_service, search_service, progress):
    """Async test client with services overridden by the fixtures above."""
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_index] = lambda: index_service
    app.dependency_overrides[get_search] = lambda: search_service
    app.dependency_overrides[get_progress] = lambda: progress

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
