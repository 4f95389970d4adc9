"""
Dependency injection for FastAPI
"""
from typing import AsyncGenerator, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adpulse.core.database import AsyncSessionLocal
from adpulse.services.meta.meta_api import MetaAPI


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session"""
    async with AsyncSessionLocal() as session:
        yield session


def get_session_factory() -> async_sessionmaker:
    """
    Session factory for sync jobs.

    The sync pipeline opens its own short-lived sessions (several run
    concurrently), so routes hand it the factory rather than a session.
    """
    return AsyncSessionLocal


def get_meta_api_factory() -> Callable[[str], MetaAPI]:
    """Graph API client constructor (one client per access token)"""
    return MetaAPI
