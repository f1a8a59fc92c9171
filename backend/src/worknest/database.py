# Async engine, per-request sessions and the transaction helper
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import Settings, get_settings
from .core.models.base import BaseModel


def build_engine(config: Settings) -> AsyncEngine:
    options = {"echo": config.database_echo}
    if config.database_url.startswith("postgresql"):
        # drop connections the server closed while idle in the pool
        options["pool_pre_ping"] = True
    return create_async_engine(config.database_url, **options)


engine = build_engine(get_settings())

# expire_on_commit=False: routes serialise ORM objects after the service committed
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency, one session per request."""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a check-then-write block atomically.

    Commits when the block exits normally, rolls back and re-raises otherwise.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise


async def create_tables() -> None:
    from .core import models  # noqa: F401 - register every mapper on the metadata

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()
