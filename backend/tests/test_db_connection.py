"""Tests for engine construction and schema creation."""

import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import NullPool, StaticPool

from postcast.db import create_engine, init_db, to_async_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgresql://u:p@db:5432/app", "postgresql+asyncpg://u:p@db:5432/app"),
        ("postgres://u:p@db:5432/app", "postgresql+asyncpg://u:p@db:5432/app"),
        ("postgresql+asyncpg://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
    ],
)
def test_to_async_url(url, expected):
    assert to_async_url(url) == expected


async def test_memory_sqlite_shares_one_connection():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    try:
        assert isinstance(engine.pool, StaticPool)
    finally:
        await engine.dispose()


async def test_postgres_engine_is_unpooled():
    engine = create_engine("postgresql://u:p@localhost:5432/app")
    try:
        assert isinstance(engine.pool, NullPool)
        assert engine.url.drivername == "postgresql+asyncpg"
    finally:
        await engine.dispose()


async def test_init_db_creates_every_table():
    engine = create_engine("sqlite+aiosqlite://")
    try:
        await init_db(engine)
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    finally:
        await engine.dispose()

    assert {
        "app_users",
        "personalized_feeds",
        "feed_filter_groups",
        "plans",
        "subscriptions",
        "personalized_programs",
        "personalized_program_posts",
        "personalized_program_attempts",
    } <= set(tables)
