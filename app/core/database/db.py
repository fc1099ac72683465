import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from app.core.config import settings
from app.core.database.base import Base

logger = logging.getLogger(__name__)


def sqlite_url_for(database_name: str) -> str:
    """One SQLite file per named context, e.g. `astra_inventory.db`."""
    return f"sqlite+aiosqlite:///./{settings.database_name_prefix}_{database_name.lower()}.db"


def create_engine(url: str | None = None) -> AsyncEngine:
    return create_async_engine(url or settings.database_url, echo=settings.debug, future=True)


engine = create_engine()
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as session:
        yield session


async def ensure_created(target: AsyncEngine | None = None) -> None:
    """
    Create every table registered on `Base.metadata` if missing.
    Dev-friendly; schema evolution belongs to a migration tool.
    """
    target = target or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Ensured schema on %s", target.url.render_as_string(hide_password=True))


async def dispose(target: AsyncEngine | None = None) -> None:
    await (target or engine).dispose()
