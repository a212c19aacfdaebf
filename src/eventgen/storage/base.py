"""
Base Storage

Shared asyncpg pool handling for the template and event storages.
"""
import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import asyncpg

logger = logging.getLogger("eventgen.storage")


class StorageNotInitializedError(RuntimeError):
    """Query issued before init() opened the pool"""


class BaseStorage:
    """
    Owns one asyncpg pool per process.

    The pool is opened lazily by init(), reopened after a fork and
    verified with SELECT 1 before use. Connection attempts back off
    linearly: retry_delay, 2 * retry_delay, ...
    """

    def __init__(
        self,
        postgres_dsn: str = "postgresql://postgres@localhost/events_site",
        min_pool_size: int = 1,
        max_pool_size: int = 10,
        connect_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        self.pg_pool: Optional[asyncpg.Pool] = None
        self.pg_dsn = postgres_dsn
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self.connect_retries = connect_retries
        self.retry_delay = retry_delay
        self.process_id = os.getpid()

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def is_initialized(self) -> bool:
        return self.pg_pool is not None and self.process_id == os.getpid()

    async def init(self):
        """Open the pool, unless this process already has one"""
        if self.is_initialized:
            return

        if self.pg_pool is not None:
            logger.info(f"{self.name}: pool inherited from process {self.process_id}, reopening")
            self.pg_pool = None
        self.process_id = os.getpid()

        started = time.monotonic()
        self.pg_pool = await self._connect()
        logger.info(f"{self.name} ready in {round((time.monotonic() - started) * 1000, 2)}ms")

    async def _connect(self) -> asyncpg.Pool:
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.connect_retries + 1):
            try:
                pool = await asyncpg.create_pool(
                    self.pg_dsn,
                    min_size=self.min_pool_size,
                    max_size=self.max_pool_size,
                    command_timeout=60,
                )
                async with pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")
                return pool
            except (OSError, asyncpg.PostgresError) as e:
                last_error = e
                logger.error(f"{self.name}: PostgreSQL unavailable (attempt {attempt}/{self.connect_retries}): {e}")
                if attempt < self.connect_retries:
                    await asyncio.sleep(self.retry_delay * attempt)

        raise ConnectionError(
            f"{self.name}: could not connect to PostgreSQL after {self.connect_retries} attempts"
        ) from last_error

    async def close(self):
        """Close the pool"""
        if self.pg_pool:
            await self.pg_pool.close()
            self.pg_pool = None
            logger.info(f"{self.name} closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a pooled connection"""
        if self.pg_pool is None:
            raise StorageNotInitializedError(f"{self.name} used before init()")
        async with self.pg_pool.acquire() as conn:
            yield conn

    async def ping(self) -> bool:
        """True when the database answers SELECT 1"""
        if self.pg_pool is None:
            return False
        try:
            return await self.fetchval("SELECT 1") == 1
        except (OSError, asyncpg.PostgresError) as e:
            logger.warning(f"{self.name}: database ping failed: {e}")
            return False

    async def execute(self, query: str, *args) -> str:
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args) -> list:
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args) -> Any:
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)
