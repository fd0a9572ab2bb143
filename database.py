"""
PostgreSQL connection pool for the blog search service

DatabaseConnection is the collaborator the query layer executes against:
single-statement helpers (execute/fetch/fetchrow/fetchval) each borrow one
pooled connection, and iterate() streams rows through a server-side cursor.
"""

import asyncpg
import logging
from typing import Optional, List, Dict, Any, AsyncIterator, Union
from contextlib import asynccontextmanager

from config import DatabaseConfig

logger = logging.getLogger(__name__)

# DB_SSL_MODE -> asyncpg `ssl` argument; other modes fall back to 'prefer'
SSL_SETTINGS: Dict[str, Union[bool, str]] = {
    'require': True,
    'disable': False,
    'prefer': 'prefer',
}


class DatabaseConnection:
    """
    Owns the asyncpg pool. Safe to share between tasks; holds no per-query state.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None

    @property
    def is_connected(self) -> bool:
        return self.pool is not None

    async def connect(self):
        """Create the pool. A second call is a no-op."""
        if self.is_connected:
            logger.warning(f"Pool for {self.config.database} already open")
            return

        try:
            self.pool = await asyncpg.create_pool(
                dsn=self.config.asyncpg_dsn,
                min_size=self.config.min_pool_size,
                max_size=self.config.max_pool_size,
                command_timeout=self.config.command_timeout,
                ssl=SSL_SETTINGS.get(self.config.ssl_mode, 'prefer'),
            )
        except Exception as e:
            logger.error(f"Could not open pool to {self.config.host}:{self.config.port}/{self.config.database}: {e}")
            raise

        logger.info(
            f"Opened pool to {self.config.host}:{self.config.port}/{self.config.database} "
            f"(size {self.config.min_pool_size}-{self.config.max_pool_size})"
        )

    async def disconnect(self):
        if self.pool is None:
            return
        await self.pool.close()
        self.pool = None
        logger.info(f"Closed pool to {self.config.database}")

    @asynccontextmanager
    async def acquire(self):
        """
        Borrow a pooled connection for the duration of the block.

            async with db.acquire() as conn:
                rows = await conn.fetch("SELECT id FROM posts")

        A failing block resets the connection before it goes back to the pool,
        then re-raises.
        """
        if self.pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self.pool.acquire() as connection:
            try:
                yield connection
            except Exception as e:
                logger.error(f"Statement failed on pooled connection: {e}", exc_info=True)
                try:
                    await connection.reset()
                except Exception as reset_error:
                    logger.error(f"Failed to reset connection: {reset_error}")
                raise

    async def execute(self, query: str, *args, timeout: Optional[float] = None) -> str:
        """Run a statement without a result set; returns its status, e.g. "UPDATE 1"."""
        async with self.acquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: Optional[float] = None) -> List[asyncpg.Record]:
        async with self.acquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: Optional[float] = None) -> Optional[asyncpg.Record]:
        """First row, or None when the statement matched nothing."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, column: int = 0, timeout: Optional[float] = None) -> Any:
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column, timeout=timeout)

    async def iterate(
        self,
        query: str,
        *args,
        prefetch: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> AsyncIterator[asyncpg.Record]:
        """
        Stream rows through a server-side cursor.

        asyncpg cursors only live inside a transaction. The cursor, the
        transaction and the pooled connection are released when the generator
        is exhausted, fails, or is closed early (use contextlib.aclosing).
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                async for record in conn.cursor(query, *args, prefetch=prefetch, timeout=timeout):
                    yield record

    async def check_connection(self) -> bool:
        """True if the pool can answer SELECT 1."""
        try:
            return await self.fetchval("SELECT 1") == 1
        except Exception as e:
            logger.error(f"Connection check failed: {e}")
            return False

    def get_pool_stats(self) -> Dict[str, Any]:
        if self.pool is None:
            return {'status': 'disconnected', 'size': 0, 'idle': 0}
        return {
            'status': 'connected',
            'size': self.pool.get_size(),
            'idle': self.pool.get_idle_size(),
            'min_size': self.config.min_pool_size,
            'max_size': self.config.max_pool_size,
        }


# Process-wide instance
_db_instance: Optional[DatabaseConnection] = None


def get_database(config: Optional[DatabaseConfig] = None) -> DatabaseConnection:
    """Shared DatabaseConnection, created from the environment on first use."""
    global _db_instance

    if _db_instance is None:
        _db_instance = DatabaseConnection(config or DatabaseConfig.from_environment())
    return _db_instance


async def init_database(config: Optional[DatabaseConfig] = None) -> DatabaseConnection:
    db = get_database(config)
    await db.connect()
    return db


async def close_database():
    global _db_instance

    if _db_instance is not None:
        await _db_instance.disconnect()
        _db_instance = None
