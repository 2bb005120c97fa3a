"""
Database engine, session factory and schema bootstrap.

The engine and session factory are built by the application lifespan
(see ``main.create_app``) and kept on ``app.state``.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool


class Base(DeclarativeBase):
    pass


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for ``database_url``.

    SQLite connections are opened per session (NullPool) so that no
    connection outlives the event loop it was created on.
    """
    kwargs = {"echo": echo}
    if make_url(database_url).get_backend_name() == "sqlite":
        kwargs["poolclass"] = NullPool
    return create_async_engine(database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create tables and indexes that do not exist yet (idempotent)."""
    # Import models so they're registered with Base
    from shortlink_app import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Provide one session per request."""
    async with request.app.state.session_factory() as session:
        yield session
