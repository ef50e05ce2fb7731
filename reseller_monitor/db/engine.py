# reseller_monitor/db/engine.py
"""
SQLModel database engine and session management.
Supports SQLite (default) and PostgreSQL via DATABASE_URL environment variable.
"""

import os
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import DATA_DIR
from .. import models  # noqa: F401  (registra las tablas en SQLModel.metadata)

# --- Database URL Configuration ---
# Read DATABASE_URL from environment. If not set, default to SQLite.
DATABASE_URL = os.getenv("DATABASE_URL")

if DATABASE_URL is None:
    # Default to SQLite in data/db/
    DATABASE_FILE = os.path.join(DATA_DIR, "db", "sessions.sqlite")
    os.makedirs(os.path.dirname(DATABASE_FILE), exist_ok=True)
    DATABASE_URL = f"sqlite+aiosqlite:///{DATABASE_FILE}"


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Creates an async engine, enabling WAL mode when the URL is SQLite."""
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    new_engine = create_async_engine(url, echo=False, connect_args=connect_args, **kwargs)

    # Activate WAL mode only for SQLite to improve concurrency
    if is_sqlite and ":memory:" not in url:
        @event.listens_for(new_engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.close()

    return new_engine


engine = build_engine(DATABASE_URL)

# Create session maker
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for async SQLModel session injection.
    Usage: session: AsyncSession = Depends(get_session)
    """
    async with async_session_maker() as session:
        yield session


def get_session_maker() -> async_sessionmaker:
    """Dependency returning the session factory used by the poller."""
    return async_session_maker


async def create_db_and_tables(target: AsyncEngine | None = None):
    """
    Create all tables defined in SQLModel models.
    Call this at application startup.
    """
    async with (target or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
