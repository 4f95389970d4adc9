"""
Shared fixtures.

The app's own engine points at an in-memory SQLite database; tests that
touch persistence get a fresh on-disk SQLite file per test instead, so
that several sessions can run concurrently against the same data.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

import adpulse.models  # noqa: E402,F401
from adpulse.core.database import Base, enable_sqlite_foreign_keys  # noqa: E402
from adpulse.models import Business  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    engine = enable_sqlite_foreign_keys(
        create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'adpulse.db'}", poolclass=NullPool)
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def business(session_factory):
    async with session_factory() as session:
        business = Business(
            id="biz-1",
            name="Acme Clinic",
            ad_account_id="act_123",
            access_token="EAAtoken1234",
            is_active=True,
            color_code="#ff0000",
        )
        session.add(business)
        await session.commit()
    return business


@pytest.fixture
def sync_day():
    return date(2024, 3, 10)
