"""Record store backends and the factory that picks one from settings."""

from __future__ import annotations

import logging

from fileindex.config import Settings
from fileindex.store.base import RecordStore, SqlRecordStore
from fileindex.store.local import LocalRecordStore
from fileindex.store.remote import RemoteRecordStore

logger = logging.getLogger(__name__)

__all__ = [
    "LocalRecordStore",
    "RecordStore",
    "RemoteRecordStore",
    "SqlRecordStore",
    "create_record_store",
]


def create_record_store(settings: Settings) -> RecordStore:
    """Build the configured backend. Callers connect() it themselves."""
    echo = settings.debug and settings.log_level == "DEBUG"
    if settings.store_backend == "remote":
        store = RemoteRecordStore(
            settings.remote_database_url,
            pool_size=settings.remote_pool_size,
            max_overflow=settings.remote_max_overflow,
            pool_timeout=settings.remote_pool_timeout,
            echo=echo,
        )
        logger.info("Using remote record store at %s", store.safe_url)
        return store

    logger.info("Using local record store at %s", settings.database_path)
    return LocalRecordStore(settings.database_path, echo=echo)
