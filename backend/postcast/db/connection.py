"""
Database Engine and Sessions

One async engine per process, built from DATABASE_URL. Services commit
their own units of work; `get_db_session` only rolls back what a failed
request left pending.
https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool

from postcast.config.settings import settings

# Hosted Postgres providers hand out both spellings
ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
}


class Base(DeclarativeBase):
    pass


def to_async_url(url: str) -> str:
    """Point a plain PostgreSQL URL at the asyncpg driver."""
    scheme, separator, rest = url.partition("://")
    driver = ASYNC_DRIVERS.get(scheme)
    if driver is None:
        return url
    return f"{driver}{separator}{rest}"


def is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Build an async engine for `url`.

    An in-memory SQLite database lives as long as its connection, so it
    gets a single shared connection. Everything else is unpooled.
    """
    url = to_async_url(url)
    if is_memory_sqlite(url):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(url, echo=echo, poolclass=NullPool)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine(settings.database_url, echo=settings.debug)
async_session_factory = create_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Yields:
        AsyncSession: An async SQLAlchemy session.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create any missing tables. Production schemas are managed by migrations."""
    import postcast.models  # noqa: F401  registers every table on Base.metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine's connections on application shutdown."""
    await engine.dispose()
