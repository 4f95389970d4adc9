"""
Database connection and session management
"""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from adpulse.core.config import settings


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> AsyncEngine:
    """
    Turn on foreign key enforcement for every new SQLite connection.

    SQLite ignores ON DELETE CASCADE unless the pragma is set per
    connection; other dialects are left untouched.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


# Async engine (sync pipeline and FastAPI handlers are fully async)
async_engine = enable_sqlite_foreign_keys(
    create_async_engine(
        settings.async_database_url,
        poolclass=NullPool,
        echo=settings.DEBUG,
    )
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def init_models() -> None:
    """Create tables that do not exist yet"""
    # Import models so they register on Base.metadata
    import adpulse.models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
