"""Base repository with async PostgreSQL connection pooling

All repositories inherit from BaseRepository and share one asyncpg pool.

Return Type Conventions
-----------------------
    get_X(id) -> Optional[T]
        Single entity lookup. None if not found.

    list_Xs(...) -> List[T]
        Filtered retrieval. [] if nothing matches.

    get_Xs_batch(ids) -> Dict[str, T]
        Batch lookup. Missing IDs are absent from the dict, never errors.

Connection Patterns
-------------------
    self.pool.acquire()
        Single read-only statements.

    self.transaction()
        Writes, or reads that must be consistent with each other.

    conn=None parameters
        Methods that accept conn join the caller's transaction instead of
        opening their own (see _ensure_conn).
"""

import asyncpg
from asyncpg import Connection
from typing import Any, List, Optional
from contextlib import asynccontextmanager

from config import get_logger

logger = get_logger(__name__).bind(component="repository")


class BaseRepository:
    """Base class for async PostgreSQL repositories

    The pool is passed in by the Database facade and never created here.
    Queries use $1, $2 placeholders.
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def _fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        """Execute query and fetch single row"""
        async with self.pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def _fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        """Execute query and fetch all rows"""
        async with self.pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def _fetchval(self, query: str, *args: Any) -> Any:
        """Execute query and return the first column of the first row"""
        async with self.pool.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def _execute(self, query: str, *args: Any) -> str:
        """Execute query without returning rows (INSERT, UPDATE, DELETE)"""
        async with self.pool.acquire() as conn:
            return await conn.execute(query, *args)

    @asynccontextmanager
    async def transaction(self):
        """Context manager for explicit transactions

        Usage:
            async with self.transaction() as conn:
                await conn.execute("DELETE FROM ballots ...")
                await conn.execute("DELETE FROM voting_cycles ...")

        Commits on clean exit, rolls back on exception.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    @asynccontextmanager
    async def _ensure_conn(self, conn: Optional[Connection] = None):
        """Use provided connection or open a new transaction."""
        if conn:
            yield conn
        else:
            async with self.transaction() as c:
                yield c

    @staticmethod
    def _parse_row_count(result: str) -> int:
        """Extract row count from PostgreSQL result like 'UPDATE 5' or 'DELETE 3'."""
        if not result:
            return 0
        return int(result.split()[-1])
