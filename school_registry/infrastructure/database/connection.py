# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy async.

The registry holds exactly one store client per process: a DatabaseManager
created in the application lifespan and handed to request handlers through
``app.state``. Nothing in this module keeps a module-level engine.

Uses SQLAlchemy 2.0 async API (asyncpg in deployment, aiosqlite in tests).

Example:
    manager = DatabaseManager.from_settings(settings)

    async with manager.session() as session:
        result = await session.execute(select(School))
        schools = result.scalars().all()

    await manager.close()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from school_registry.core.config.settings import Settings


class DatabaseError(Exception):
    """Base exception for database operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class DatabaseManager:
    """Owns the async engine and session factory for the registry database.

    Attributes:
        engine: SQLAlchemy async engine.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        echo: bool = False,
    ) -> None:
        """Create the engine and session factory.

        Args:
            url: Async database URL.
            pool_size: Connection pool size (ignored for SQLite).
            max_overflow: Maximum overflow connections (ignored for SQLite).
            echo: Log SQL statements.

        Raises:
            DatabaseError: If the engine cannot be created.
        """
        engine_kwargs: dict[str, Any] = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=1800,
            )

        try:
            self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to initialize database connection", e) from e

        self._sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DatabaseManager":
        """Build a manager from application settings.

        Args:
            settings: Application settings containing database configuration.

        Returns:
            New DatabaseManager.
        """
        return cls(
            settings.database.url,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            echo=settings.database.echo,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Get an async session.

        Stores commit their own writes; this context only guarantees that a
        failed session is rolled back and closed.

        Yields:
            AsyncSession for database operations.

        Raises:
            DatabaseError: If a database operation fails.
        """
        async with self._sessionmaker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError("Database operation failed", e) from e
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Check if the database is reachable.

        Returns:
            True if the database is reachable, False otherwise.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self.engine.dispose()
