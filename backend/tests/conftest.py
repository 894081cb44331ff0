"""Shared test fixtures for the Tech Post Cast API tests."""

import os

# Settings are read at import time, so the environment must be in place
# before anything from postcast is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("FREE_PLAN_ID", "plan-free")
os.environ.setdefault("QIITA_API_ACCESS_TOKEN", "test-qiita-token")
os.environ.setdefault("CLERK_WEBHOOK_SECRET", "whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw")

import pytest  # noqa: E402

from postcast.db import create_engine, create_session_factory, init_db  # noqa: E402
from tests.factories import Factory, FakeRssStorage  # noqa: E402


@pytest.fixture
async def engine():
    """In-memory SQLite database shared across one test."""
    engine = create_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def storage():
    return FakeRssStorage()
