"""Engine and session lifecycle for the tech-pack store.

One engine per process, created on first use from ``DATABASE_URL``. Request
handlers, the CLI and the generation service all open their unit of work
through ``get_session()``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from techpack.config import DBConfig, get_config
from techpack.db.models import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(db: DBConfig) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": db.echo}
    if db.url.lower().startswith("sqlite"):
        # aiosqlite runs without a QueuePool
        return options
    options.update(
        pool_size=db.pool_size,
        max_overflow=db.pool_max_overflow,
        pool_timeout=db.pool_timeout,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    return options


def get_engine() -> AsyncEngine:
    """Shared async engine.

    Raises:
        KeyError: If DATABASE_URL is not configured
    """
    global _engine
    if _engine is None:
        db = get_config().db
        _engine = create_async_engine(db.url, **_engine_options(db))
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        # Rows stay readable after commit so routes can serialize them
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Unit of work: commit when the block exits cleanly, roll back otherwise.

    Usage:
        async with get_session() as session:
            product = await repository.get_product(session, product_id)
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def init_db(drop: bool = False) -> None:
    """Create the schema, optionally dropping existing tables first.

    Used by ``techpack init`` and local development; deployed databases are
    provisioned separately.
    """
    async with get_engine().begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine; the next ``get_engine()`` builds a fresh one."""
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
