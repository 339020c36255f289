"""SQLAlchemy async engines — embedded SQLite (WAL mode) and pooled remote."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from fileindex.models import Base

logger = logging.getLogger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite(dbapi_conn, _connection_record):
    """Apply SQLite PRAGMAs for bulk indexing."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA cache_size=-16000")  # 16 MB
    cursor.execute("PRAGMA temp_store=MEMORY")
    cursor.close()
    # Built-in lower() only folds ASCII; match PostgreSQL for names like "Ärger"
    dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_local_engine(database_path: str | Path, echo: bool = False) -> AsyncEngine:
    """Engine for the embedded store. Creates the DB directory if needed."""
    db_path = Path(database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=echo)
    # Apply SQLite PRAGMAs on each new connection
    event.listen(engine.sync_engine, "connect", _configure_sqlite)
    return engine


def create_remote_engine(
    url: str,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_timeout: float = 30.0,
    echo: bool = False,
) -> AsyncEngine:
    """Pooled engine for a networked database (stale connections pre-pinged)."""
    pool_args: dict = {}
    # SQLite URLs keep the dialect's own pool class, which may not take sizing
    if make_url(url).get_backend_name() != "sqlite":
        pool_args = {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
        }
    return create_async_engine(url, echo=echo, pool_pre_ping=True, **pool_args)


async def init_schema(engine: AsyncEngine) -> None:
    """Create tables and indexes that don't exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Index tables created/verified (%s)", engine.url.render_as_string(hide_password=True))
