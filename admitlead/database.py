"""
Async SQLAlchemy engine and sessions.

PostgreSQL (asyncpg) in production; the lead store also runs on SQLite,
which is what the test suite uses. Sessions use expire_on_commit=False:
the store commits after every write and the reconciler keeps reading the
returned rows afterwards.
"""
import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


class Base(DeclarativeBase):
    pass


def engine_options(database_url: str, settings) -> dict:
    """create_async_engine kwargs. Pool sizing only applies to pooled server databases."""
    options = {"echo": settings.app_env == "development"}
    if make_url(database_url).get_backend_name() != "sqlite":
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
        options["pool_pre_ping"] = True
    return options


def get_session_factory() -> async_sessionmaker:
    global _engine, _session_factory
    if _session_factory is None:
        from admitlead.config import get_settings
        settings = get_settings()
        _engine = create_async_engine(settings.database_url, **engine_options(settings.database_url, settings))
        _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def dialect_name(session: AsyncSession) -> str:
    """"postgresql" in production, "sqlite" in tests."""
    return session.get_bind().dialect.name


async def ping(session: AsyncSession) -> None:
    """Round-trip to the database; raises if it is unreachable."""
    await session.execute(text("SELECT 1"))


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, rolled back if the handler raises."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
