"""Async engine and session factory for the content store.

Exports only read from the store: extractors run ``select``/``count``
queries through sessions created by the factory held here. One engine is
created per process (API lifespan or CLI run) and disposed on shutdown.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the current async engine.

    Raises:
        RuntimeError: If the engine has not been initialized.
    """
    if _engine is None:
        msg = "Database engine not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the current session factory.

    Raises:
        RuntimeError: If the engine has not been initialized.
    """
    if _session_factory is None:
        msg = "Session factory not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _session_factory


def init_engine(
    database_url: str,
    *,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
) -> AsyncEngine:
    """Create the process-wide engine and session factory.

    Args:
        database_url: Async connection string (``postgresql+asyncpg`` in
            production, ``sqlite+aiosqlite`` for local runs and tests).
        echo: Log emitted SQL.
        pool_size: Connection pool size; ignored for SQLite.
        max_overflow: Connections allowed beyond ``pool_size``; ignored for SQLite.

    Returns:
        The created async engine.
    """
    global _engine, _session_factory  # noqa: PLW0603
    options: dict[str, object] = {"echo": echo}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(pool_size=pool_size, max_overflow=max_overflow, pool_pre_ping=True)
    _engine = create_async_engine(database_url, **options)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


async def dispose_engine() -> None:
    """Dispose of the async engine and release connections."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
