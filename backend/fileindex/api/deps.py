"""FastAPI dependency injection — service accessors (overridable in tests)."""

from __future__ import annotations

from fileindex.services import (
    get_index_service,
    get_progress_broadcaster,
    get_record_store,
    get_search_service,
)
from fileindex.services.index_service import IndexService
from fileindex.services.progress import ProgressBroadcaster
from fileindex.services.search_service import SearchService
from fileindex.store.base import RecordStore


def get_store() -> RecordStore:
    return get_record_store()


def get_index() -> IndexService:
    return get_index_service()


def get_search() -> SearchService:
    return get_search_service()


def get_progress() -> ProgressBroadcaster:
    return get_progress_broadcaster()
