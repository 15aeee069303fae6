"""
Database connection and session management.
"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
import logging

from ontology_manager.config import settings
from ontology_manager.errors import OntologyManagerError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def get_database_url() -> str:
    """Get the async database URL."""
    base_url = str(settings.DATABASE_URL)

    # Plain driver names are upgraded to their async counterparts
    if base_url.startswith("sqlite://"):
        base_url = base_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    elif base_url.startswith("postgresql://"):
        base_url = base_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return base_url


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {"server_settings": {"application_name": "ontology_manager"}}


# Each session opens its own connection; requests are short and independent
engine = create_async_engine(
    get_database_url(),
    poolclass=NullPool,
    echo=False,
    future=True,
    connect_args=_connect_args(get_database_url()),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def init_db() -> None:
    """Initialize database tables."""
    # Register models with the metadata before creating tables
    from ontology_manager.models import database  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except OntologyManagerError:
            await session.rollback()
            raise
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise


async def close_db():
    """Close database connections."""
    await engine.dispose()
    logger.info("Database connections closed")
