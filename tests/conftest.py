import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from educrm.database import get_db
from educrm.main import app
from educrm.models import Base
from educrm.scripts.seed_dev_data import SeedResult, seed_dev_data


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def database_url(tmp_path) -> str:
    """A fresh SQLite database with the full schema, one per test."""

    url = f"sqlite+aiosqlite:///{tmp_path / 'educrm.db'}"

    async def _create_schema() -> None:
        engine = create_async_engine(url, poolclass=NullPool)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create_schema())
    return url


@pytest.fixture()
def seeded(database_url: str) -> SeedResult:
    return seed_dev_data(database_url)


@pytest.fixture()
def client(database_url: str):
    engine = create_async_engine(database_url, poolclass=NullPool)
    session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async def _get_test_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
