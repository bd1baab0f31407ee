# teamsync/db/session.py
import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from teamsync.db.base import Base

# Detect if we're running under pytest
IS_TEST = "PYTEST_CURRENT_TEST" in os.environ


def build_engine(db_url: str) -> AsyncEngine:
    """
    Create the async engine backing one workspace's document gateway.

    Each workspace owns its engine so that tests (and multiple app
    instances) never share connections across event loops.
    """
    kwargs = {"echo": False, "future": True}
    if IS_TEST:
        # Avoid connection reuse across the per-test event loops.
        kwargs["poolclass"] = NullPool
    return create_async_engine(db_url, **kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Create the document table if it does not exist.

    Safe to call on every startup; existing data is left untouched.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

