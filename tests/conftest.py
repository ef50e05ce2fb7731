"""
Pytest configuration and shared fixtures.
"""
import asyncio
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

# Nunca tocar la base de datos real durante los tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("APP_ENV", "test")

from reseller_monitor.db.engine import build_engine, create_db_and_tables  # noqa: E402
from reseller_monitor.models import Reseller, ResellerUserMapping, Router  # noqa: E402


@asynccontextmanager
async def memory_db():
    """
    Clean in-memory database for one test.
    StaticPool keeps the single SQLite connection alive between sessions.
    """
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_db_and_tables(engine)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        yield maker
    finally:
        await engine.dispose()


@pytest.fixture
def run_with_db():
    """
    Runs `scenario(session_maker)` inside one event loop with a fresh database.
    """
    def _run(scenario):
        async def _main():
            async with memory_db() as maker:
                return await scenario(maker)

        return asyncio.run(_main())

    return _run


async def add_router(
    maker, name="core-1", host="10.0.0.1", routeros_version="v7", password="secret", **kwargs
) -> Router:
    router = Router(
        name=name,
        host=host,
        username="api",
        password=password,
        routeros_version=routeros_version,
        **kwargs,
    )
    async with maker() as session:
        session.add(router)
        await session.commit()
        await session.refresh(router)
    return router


async def add_reseller(maker, name, rules=None, created_offset=0, **kwargs) -> Reseller:
    reseller = Reseller(
        name=name,
        detection_rules=rules,
        created_at=datetime(2024, 1, 1) + timedelta(minutes=created_offset),
        **kwargs,
    )
    async with maker() as session:
        session.add(reseller)
        await session.commit()
        await session.refresh(reseller)
    return reseller


async def add_mapping(maker, reseller, username) -> ResellerUserMapping:
    mapping = ResellerUserMapping(reseller_id=reseller.id, pppoe_username=username)
    async with maker() as session:
        session.add(mapping)
        await session.commit()
        await session.refresh(mapping)
    return mapping
