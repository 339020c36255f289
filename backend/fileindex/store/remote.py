"""Networked relational store with connection pooling and reconnect-on-demand."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from fileindex.database import create_remote_engine
from fileindex.exceptions import StoreError, StoreUnavailableError
from fileindex.store.base import SqlRecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_disconnect(exc: BaseException) -> bool:
    """True if the error means the server or the connection is gone."""
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (OperationalError, InterfaceError, OSError))


class RemoteRecordStore(SqlRecordStore):
    """Store backed by a server database (PostgreSQL via asyncpg by default).

    A connectivity failure triggers exactly one reconnect and retry of the
    failed operation; each operation is a single transaction, so a retried
    batch never applies twice.
    """

    backend = "remote"

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        max_overflow: int = 5,
        pool_timeout: float = 30.0,
        echo: bool = False,
    ):
        super().__init__()
        self.url = url
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._pool_timeout = pool_timeout
        self._echo = echo

    @property
    def safe_url(self) -> str:
        return make_url(self.url).render_as_string(hide_password=True)

    def _create_engine(self) -> AsyncEngine:
        return create_remote_engine(
            self.url,
            pool_size=self._pool_size,
            max_overflow=self._max_overflow,
            pool_timeout=self._pool_timeout,
            echo=self._echo,
        )

    async def reconnect(self, failed: AsyncEngine | None = None) -> None:
        """Replace the pool with a fresh one.

        With ``failed`` given, the swap only happens while that engine is
        still the current one; a concurrent caller that already reconnected
        is left alone. The old engine stays usable until the new one is up.
        """
        async with self._lock:
            current = self._engine
            if failed is not None and current is not None and current is not failed:
                return
            try:
                engine = await self._open_engine()
            except BaseException:
                self._engine = None
                self._session_factory = None
                if current is not None:
                    await current.dispose()
                raise
            self._install(engine)
            if current is not None:
                await current.dispose()
            logger.info("Remote store %s reconnected", self.safe_url)

    async def _run(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        engine: AsyncEngine | None = None
        try:
            await self.connect()
            engine = self._engine
            return await self._execute(operation)
        except (SQLAlchemyError, OSError) as e:
            if not is_disconnect(e):
                raise StoreError(f"remote store operation failed: {e}") from e
            logger.warning("Remote store %s unreachable (%s), reconnecting", self.safe_url, e)

        try:
            await self.reconnect(failed=engine)
            return await self._execute(operation)
        except (SQLAlchemyError, OSError) as e:
            if is_disconnect(e):
                logger.error("Remote store %s still unreachable: %s", self.safe_url, e)
                raise StoreUnavailableError(f"remote store unreachable: {e}") from e
            raise StoreError(f"remote store operation failed: {e}") from e
