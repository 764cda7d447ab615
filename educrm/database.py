from __future__ import annotations

import os
import sys
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from educrm.config import settings


def _running_under_pytest() -> bool:
    return bool(os.getenv("PYTEST_CURRENT_TEST")) or "pytest" in sys.modules


def engine_options(database_url: str) -> dict[str, Any]:
    # TestClient drives requests from its own event loop; pooled asyncpg connections are loop-bound.
    if _running_under_pytest():
        return {"poolclass": NullPool}
    if database_url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; stores commit their own changes."""

    async with SessionLocal() as session:
        yield session
