"""
Async engine, session factory and the ``get_db`` request dependency
"""

from typing import AsyncIterator

import structlog
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from pathway_tracker.core.config import settings

logger = structlog.get_logger()


def _async_url(raw_url: str) -> str:
    """Point plain ``postgresql://`` URLs at the asyncpg driver"""
    url = make_url(raw_url)
    if url.drivername == "postgresql":
        url = url.set(drivername="postgresql+asyncpg")
    return url.render_as_string(hide_password=False)


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG and settings.ENVIRONMENT == "development"}
    if make_url(url).get_backend_name() == "postgresql":
        options.update(settings.database_pool_options)
        options["connect_args"] = {"server_settings": {"application_name": "pathway-tracker-api"}}
    return options


database_url = _async_url(settings.DATABASE_URL)
engine = create_async_engine(database_url, **_engine_options(database_url))

if engine.dialect.name == "sqlite":
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # Notes, tasks and messages rely on ON DELETE CASCADE
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    One session per request, committed when the endpoint returns normally
    and rolled back when it raises
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_database_health() -> bool:
    try:
        async with engine.connect() as conn:
            return (await conn.execute(text("SELECT 1"))).scalar() == 1
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database health check failed", error=str(e))
        return False


async def init_database() -> None:
    """Create missing tables; schema changes beyond that are out of band"""
    from pathway_tracker import models  # noqa: F401  registers every table on Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database ready", backend=engine.dialect.name)


async def close_database() -> None:
    await engine.dispose()
    logger.info("Database connections closed")
