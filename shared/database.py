"""
PostgreSQL connection handling shared by the service repositories.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from shared.errors import PersistenceError
from shared.logging import get_logger
from shared.tracing import trace_operation

# Failures of the system of record that surface to callers as PersistenceError.
DATABASE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PostgresDatabase:
    """Owns an asyncpg pool and translates driver errors."""

    def __init__(self, dsn: str, logger_name: str, min_size: int = 2, max_size: int = 10):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.logger = get_logger(logger_name)
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self, reset_schema: bool = False):
        """Open the pool and make sure the schema exists."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=30
            )
        except DATABASE_ERRORS as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise PersistenceError(str(e), details={"operation": "start"}) from e

        if reset_schema:
            await self.drop_tables()
        await self.create_tables()

        self.logger.info("PostgreSQL persistence started", reset_schema=reset_schema)

    async def stop(self):
        """Close the pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def create_tables(self):
        """Create tables. Override in subclasses."""

    async def drop_tables(self):
        """Drop tables. Override in subclasses."""

    @asynccontextmanager
    async def connection(self, operation: str) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, raising PersistenceError on driver failures."""
        if self.pool is None:
            raise PersistenceError("Database pool is not started", details={"operation": operation})

        with trace_operation(f"db.{operation}", **{"db.system": "postgresql", "db.operation": operation}):
            try:
                async with self.pool.acquire() as conn:
                    yield conn
            except DATABASE_ERRORS as e:
                self.logger.error("Database operation failed", operation=operation, error=str(e))
                raise PersistenceError(str(e), details={"operation": operation}) from e

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self.connection("health_check") as conn:
                await conn.fetchval("SELECT 1")
                return True
        except PersistenceError:
            return False
