"""
Test configuration and fixtures for the FastAPI URL shortener.
This centralizes all test setup, making individual tests clean.

Service code is async; tests drive it with asyncio.run(). SQLite engines use
NullPool, so sessions opened on different event loops never share a connection.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink_app.cache.strategies import InMemoryCache
from shortlink_app.config import Settings
from shortlink_app.database.connection import create_engine, create_session_factory, init_db
from shortlink_app.models.link import ShortLink
from shortlink_app.services.code_generator import CodeGenerator
from shortlink_app.services.link_cache import LinkCache
from shortlink_app.services.link_service import LinkService


@pytest.fixture(scope="function")
def test_settings(tmp_path):
    """Settings with an isolated SQLite file and the in-memory cache."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        cache_backend="memory",
    )


@pytest.fixture(scope="function")
def engine(test_settings):
    """
    Create a fresh database for each test.
    This ensures tests are isolated and don't affect each other.
    """
    engine = create_engine(test_settings.database_url)
    asyncio.run(init_db(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture(scope="function")
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture(scope="function")
def cache():
    return InMemoryCache()


@pytest.fixture(scope="function")
def link_cache(cache):
    return LinkCache(cache, ttl=3600)


@pytest.fixture(scope="function")
def code_generator(test_settings):
    return CodeGenerator(length=test_settings.code_length, alphabet=test_settings.code_alphabet)


@pytest.fixture(scope="function")
def run_with_service(session_factory, code_generator, link_cache):
    """
    Run ``fn(service)`` inside its own session and event loop.

    Usage: ``link = run_with_service(lambda s: s.create_short_link(url))``
    """
    def runner(fn, **service_kwargs):
        async def scenario():
            async with session_factory() as db:
                service = LinkService(
                    db,
                    code_generator=service_kwargs.pop("code_generator", code_generator),
                    link_cache=service_kwargs.pop("link_cache", link_cache),
                    **service_kwargs,
                )
                return await fn(service)
        return asyncio.run(scenario())
    return runner


@pytest.fixture(scope="function")
def seed_link(session_factory):
    """Insert a ShortLink directly, bypassing the service."""
    def seed(code: str, target_url: str = "https://seeded.example.com"):
        async def insert():
            async with session_factory() as db:
                db.add(ShortLink(code=code, target_url=target_url, short_url=code))
                await db.commit()
        asyncio.run(insert())
    return seed


@pytest.fixture(scope="function")
def count_links(session_factory):
    """Return the number of stored ShortLink rows (optionally for one target_url)."""
    from sqlalchemy import func, select

    def count(target_url=None) -> int:
        async def query():
            stmt = select(func.count()).select_from(ShortLink)
            if target_url is not None:
                stmt = stmt.where(ShortLink.target_url == target_url)
            async with session_factory() as db:
                return await db.scalar(stmt)
        return asyncio.run(query())
    return count


@pytest.fixture(scope="function")
def client(test_settings):
    """
    Create a test client around an app built from the test settings.
    This is the main fixture that API tests will use.
    """
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client
