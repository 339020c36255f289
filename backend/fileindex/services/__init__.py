"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fileindex.config import settings

if TYPE_CHECKING:
    from fileindex.services.index_service import IndexService
    from fileindex.services.progress import ProgressBroadcaster
    from fileindex.services.search_service import SearchService
    from fileindex.store.base import RecordStore

logger = logging.getLogger(__name__)

_store: RecordStore | None = None
_index_service: IndexService | None = None
_search_service: SearchService | None = None
_progress: ProgressBroadcaster | None = None


async def init_services() -> None:
    """Create the record store and wire up all service singletons."""
    global _store, _index_service, _search_service, _progress

    from fileindex.services.index_service import IndexService
    from fileindex.services.progress import ProgressBroadcaster
    from fileindex.services.search_service import SearchService, WeightedFieldScorer
    from fileindex.store import create_record_store

    _store = create_record_store(settings)
    try:
        await _store.connect()
    except Exception as e:
        # Remote backend may be down at startup; operations reconnect on demand
        logger.error("Record store not reachable at startup (%s): %s", _store.backend, e)

    _index_service = IndexService(
        _store,
        batch_size=settings.scan_batch_size,
        follow_symlinks=settings.follow_symlinks,
    )
    _search_service = SearchService(
        _store,
        scorer=WeightedFieldScorer(min_match_length=settings.fuzzy_min_match_length),
        threshold=settings.fuzzy_threshold,
        limit=settings.fuzzy_limit,
        index_limit=settings.index_search_limit,
    )
    _progress = ProgressBroadcaster(queue_size=settings.progress_queue_size)
    logger.info("Services initialized (%s store)", _store.backend)


async def shutdown_services() -> None:
    """Close the record store."""
    global _store, _index_service, _search_service, _progress
    if _store:
        await _store.close()
    _store = None
    _index_service = None
    _search_service = None
    _progress = None


def get_record_store() -> RecordStore:
    if _store is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _store


def get_index_service() -> IndexService:
    if _index_service is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _index_service


def get_search_service() -> SearchService:
    if _search_service is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _search_service


def get_progress_broadcaster() -> ProgressBroadcaster:
    if _progress is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _progress
