"""
Database configuration and session management.

Provides async database sessions and metadata for ORM models.

DATABASE_URL is read from hospital_docs.core.config (single resolution path).
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
import logging

from hospital_docs.core.config import settings

logger = logging.getLogger(__name__)

# Create declarative base for ORM models
Base = declarative_base()


def to_async_url(url: str) -> str:
    """Convert a plain postgresql:// URL to the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


ASYNC_DATABASE_URL = to_async_url(settings.DATABASE_URL)

# Engine and factory are created lazily so the in-memory backend never needs a driver
_engine = None
_session_factory = None


def get_engine():
    """Return the process-wide async engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            ASYNC_DATABASE_URL,
            echo=False,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            connect_args={"server_settings": {"client_encoding": "utf8"}},
        )
        logger.info("Database engine created")
    return _engine


def get_session_factory() -> async_sessionmaker:
    """Return the async session factory bound to the engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def init_database():
    """
    Initialize database - create tables if they don't exist.

    Note: In production, use Alembic migrations instead.
    This is mainly for development.
    """
    # Every model that inherits from Base must be imported here,
    # otherwise Base.metadata.create_all() won't know about its table.
    from hospital_docs.api.models import (  # noqa: F401
        UserORM, UserSessionORM,
        DocumentCategoryORM, DocumentORM, DownloadHistoryORM,
        WorkflowORM, CirculationDocumentORM,
        StorageFileORM, ActivityLogORM,
    )

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database initialized")


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
