"""
Async Database Manager for SQLAlchemy
- Automatic PostgreSQL database creation if missing
- Table initialization from the registered models
- One session per request, committed on success and rolled back on error
"""
import logging
from contextlib import asynccontextmanager
from importlib import import_module
from typing import AsyncGenerator, Optional

import asyncpg
import sqlalchemy
from sqlalchemy import text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.core.config import settings
from taskboard.models.base import Base

logger = logging.getLogger(__name__)


def _is_missing_database(error: Optional[BaseException]) -> bool:
    """SQLAlchemy wraps the asyncpg error, so follow the chain down to it."""
    while error is not None:
        if isinstance(error, asyncpg.exceptions.InvalidCatalogNameError):
            return True
        error = getattr(error, "orig", None) or error.__cause__
    return False

DB_MODELS = [
    "taskboard.models.user",
    "taskboard.models.task",
]


class DatabaseSessionManager:
    """Manages async database sessions with auto-creation and setup."""

    def __init__(self):
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    async def init(self, database_url: Optional[str] = None):
        """Initialize database connection with auto-creation fallback"""
        db_url = database_url or settings.DATABASE_URL
        self.engine = self._create_engine(db_url)

        try:
            async with self.engine.begin() as conn:
                await self._setup_database(conn)
        except Exception as e:
            if not _is_missing_database(e) or not await self._create_database(db_url):
                raise
            async with self.engine.begin() as conn:
                await self._setup_database(conn)

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autoflush=False,
        )

    def _create_engine(self, db_url: str) -> AsyncEngine:
        if db_url.startswith("sqlite"):
            return create_async_engine(db_url, echo=settings.DB_ECHO)
        return create_async_engine(
            db_url,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=30,
            pool_recycle=300,
            pool_pre_ping=True,
            echo=settings.DB_ECHO,
        )

    async def _setup_database(self, conn):
        """Initialize database schema"""
        await conn.execute(text("SELECT 1"))
        for model in DB_MODELS:
            import_module(model)
        logger.info(f"📝 Models registered: {list(Base.metadata.tables.keys())}")
        await conn.run_sync(Base.metadata.create_all)

    async def _create_database(self, db_url: str) -> bool:
        """Create the database if it does not exist"""
        url = make_url(db_url)
        db_name = url.database
        # Connect to the default database (usually 'postgres')
        engine = create_async_engine(url.set(database="postgres"), isolation_level="AUTOCOMMIT")
        try:
            async with engine.begin() as conn:
                await conn.execute(text(f'CREATE DATABASE "{db_name}"'))
            logger.info(f"✅ Database '{db_name}' created successfully.")
            return True
        except (asyncpg.exceptions.PostgresError, sqlalchemy.exc.SQLAlchemyError) as e:
            logger.error(f"❌ Failed to create database: {e}")
            return False
        finally:
            await engine.dispose()

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for safe session handling"""
        if not self.session_factory:
            raise RuntimeError("DatabaseSessionManager not initialized")
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self):
        """Cleanup connection pool"""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


# Initialize session manager
session_manager = DatabaseSessionManager()


async def aget_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions
    Usage:
    @router.get("/")
    async def endpoint(db: AsyncSession = Depends(aget_db)):
        ...
    """
    async with session_manager.get_session() as session:
        yield session
