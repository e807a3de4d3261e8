"""
Database engine configuration.

Provides the process-wide SQLAlchemy async engine that every table
repository is bound to, plus disposal and connectivity helpers.
Repositories receive the engine explicitly; this module only decides
how it is built and shared.
"""

from functools import lru_cache
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from tablerepo.core.config import settings


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _is_memory_sqlite(database_url: str) -> bool:
    url = make_url(database_url)
    return url.database in (None, "", ":memory:")


def get_async_engine(
    database_url: Optional[str] = None,
    echo: Optional[bool] = None,
) -> AsyncEngine:
    """
    Create and configure an async SQLAlchemy engine.

    For SQLite:
    - Enables check_same_thread=False for async compatibility
    - Uses StaticPool for in-memory databases so every checkout
      sees the same database
    - Turns on foreign key enforcement for each new connection

    Args:
        database_url: Connection URL (defaults to settings.database_url)
        echo: Log compiled SQL (defaults to settings.database_echo)

    Returns:
        Configured AsyncEngine instance

    Note:
        Pooling, dialect compilation and the wire protocol are all
        handled by SQLAlchemy and the DBAPI driver.
    """
    database_url = database_url or settings.database_url
    is_sqlite = _is_sqlite(database_url)

    engine_kwargs: dict = {
        "echo": settings.database_echo if echo is None else echo,
    }

    if is_sqlite:
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(database_url):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = settings.database_pool_pre_ping

    engine = create_async_engine(database_url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """
    Get the process-wide shared engine.

    Created on first use from the global settings and reused by every
    repository afterwards.

    Example:
        repo = TableRepository("users", get_engine())
    """
    return get_async_engine()


async def close_db() -> None:
    """
    Dispose the shared engine.

    Should be called at application shutdown. A later get_engine()
    call builds a fresh engine.
    """
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        get_engine.cache_clear()


async def check_connection(engine: Optional[AsyncEngine] = None) -> bool:
    """
    Check if the database is reachable.

    Args:
        engine: Engine to check (defaults to the shared engine)

    Returns:
        True if a trivial query succeeds, False otherwise

    Example:
        if not await check_connection():
            raise RuntimeError("Database unavailable")
    """
    engine = engine or get_engine()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            return True
    except Exception:
        return False


def get_database_info(engine: Optional[AsyncEngine] = None) -> dict:
    """
    Get database information for monitoring.

    The password part of the URL is masked.
    """
    engine = engine or get_engine()
    return {
        "url": engine.url.render_as_string(hide_password=True),
        "dialect": engine.dialect.name,
        "driver": engine.dialect.driver,
        "async": True,
    }
