"""
Database package.

The declarative base, the process-wide engine and session factory, and
the request-scoped session dependency.
"""

from postcast.db.connection import (
    Base,
    async_session_factory,
    close_db,
    create_engine,
    create_session_factory,
    engine,
    get_db_session,
    init_db,
    to_async_url,
)

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "create_engine",
    "create_session_factory",
    "to_async_url",
    "get_db_session",
    "init_db",
    "close_db",
]
