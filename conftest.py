# conftest.py
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from app.core.database.base import Base
from persistence.adapters.outbound.store_sqlalchemy import SqlAlchemyStore
from persistence.services.store_operations import StoreOperations
from persistence.tests.fakes import SpyStore
from persistence.tests.models import Widget  # registers the table on Base.metadata


# ---- In-memory store ---------------------------------------------------------

@pytest.fixture
def spy_store() -> SpyStore:
    return SpyStore()


@pytest.fixture
def memory_ops(spy_store: SpyStore) -> StoreOperations:
    return StoreOperations(spy_store)


# ---- Async engine + session --------------------------------------------------

@pytest_asyncio.fixture(scope="function")
async def async_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def SessionMaker(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)

@pytest_asyncio.fixture
async def db_session(SessionMaker) -> AsyncGenerator[AsyncSession, None]:
    async with SessionMaker() as s:
        yield s


@pytest_asyncio.fixture
async def widget_store(db_session: AsyncSession) -> SqlAlchemyStore:
    return SqlAlchemyStore(db_session, Widget)

@pytest_asyncio.fixture
async def widget_ops(widget_store: SqlAlchemyStore) -> StoreOperations:
    return StoreOperations(widget_store)
