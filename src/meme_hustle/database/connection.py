"""Database connection management."""

import asyncio
from contextlib import asynccontextmanager, nullcontext
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..exceptions.base import ErrorCode, StoreError
from ..models.database.memes import Base
from ..utils.logging import get_logger

logger = get_logger(__name__)


class DatabaseConnectionManager:
    """Database connection manager.

    Owns the async engine and session factory for one application instance.
    """

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self._async_engine: Optional[AsyncEngine] = None
        self._async_session_factory: Optional[async_sessionmaker] = None
        # Sessions on a single shared in-memory connection must take turns
        self._shared_connection_lock: Optional[asyncio.Lock] = (
            asyncio.Lock() if self._is_memory_sqlite() else None
        )

    def _is_memory_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite") and ":memory:" in self.database_url

    @property
    def async_engine(self) -> AsyncEngine:
        """Get asynchronous engine, creating if needed.

        Returns:
            AsyncEngine: SQLAlchemy async engine
        """
        if not self._async_engine:
            engine_kwargs = {}
            if self.database_url.startswith("sqlite"):
                engine_kwargs["connect_args"] = {"check_same_thread": False}
                if self._is_memory_sqlite():
                    # One shared connection, otherwise every session sees an empty database
                    engine_kwargs["poolclass"] = StaticPool
            else:
                engine_kwargs.update(
                    {
                        "pool_size": 10,
                        "max_overflow": 20,
                        "pool_timeout": 30,
                        "pool_recycle": 3600,
                    }
                )

            self._async_engine = create_async_engine(
                self.database_url,
                pool_pre_ping=True,
                echo=False,
                **engine_kwargs,
            )
        return self._async_engine

    @property
    def session_factory(self) -> async_sessionmaker:
        """Get asynchronous session factory, creating if needed.

        Returns:
            async_sessionmaker: SQLAlchemy async session factory
        """
        if not self._async_session_factory:
            self._async_session_factory = async_sessionmaker(
                self.async_engine,
                class_=AsyncSession,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._async_session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an asynchronous database session.

        Yields:
            AsyncSession: Database session
        """
        async with self._shared_connection_lock or nullcontext():
            session = self.session_factory()
            try:
                yield session
            finally:
                await session.close()

    async def init_db(self) -> None:
        """Create the memes and bids tables if they do not exist."""
        logger.info("creating_tables", database=self.async_engine.url.render_as_string())
        async with self.async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def check_connection(self) -> bool:
        """Check database connection health.

        Returns:
            bool: True if connection is healthy

        Raises:
            StoreError: If connection check fails
        """
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            raise StoreError(
                f"Database connection check failed: {e}",
                ErrorCode.STORE_QUERY_ERROR,
                original_error=e,
            )

    async def dispose(self) -> None:
        """Release pooled connections."""
        if self._async_engine is not None:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None
