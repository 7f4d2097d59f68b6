"""PostgreSQL Database Layer with Repository Pattern

Repositories handle all data access. The Database class owns the pool and
offers the few operations that span repositories.
"""

import asyncpg
from typing import Optional
from pathlib import Path

from config import get_logger, config
from database.repositories_async import (
    BallotRepository,
    CycleRepository,
    DirectoryRepository,
    InviteRepository,
)
from exceptions import DatabaseConnectionError

logger = get_logger(__name__).bind(component="database_postgres")


class Database:
    """Async PostgreSQL database with repository pattern

    Usage:
        db = await Database.create()
        cycle = await db.cycles.get_cycle("cyc_Xk3v9QpL2m")
        ballots = await db.ballots.list_ballots(cycle.id)
        await db.close()
    """

    pool: asyncpg.Pool

    cycles: CycleRepository
    ballots: BallotRepository
    invites: InviteRepository
    directory: DirectoryRepository

    def __init__(self, pool: asyncpg.Pool):
        """Use Database.create() instead of direct instantiation."""
        self.pool = pool

        self.cycles = CycleRepository(pool)
        self.ballots = BallotRepository(pool)
        self.invites = InviteRepository(pool)
        self.directory = DirectoryRepository(pool)

        logger.info("database initialized with repositories", pool_size=f"{pool._minsize}-{pool._maxsize}")

    @classmethod
    async def create(
        cls,
        dsn: Optional[str] = None,
        min_size: int = config.POSTGRES_POOL_MIN_SIZE,
        max_size: int = config.POSTGRES_POOL_MAX_SIZE
    ) -> "Database":
        """Create database with connection pool

        Args:
            dsn: PostgreSQL connection string (defaults to config.get_postgres_dsn())
            min_size: Minimum pool size
            max_size: Maximum pool size
        """
        if dsn is None:
            dsn = config.get_postgres_dsn()

        try:
            pool = await asyncpg.create_pool(
                dsn,
                min_size=min_size,
                max_size=max_size,
                command_timeout=60,
            )
            logger.info("connection pool created", min_size=min_size, max_size=max_size)
            return cls(pool)
        except (asyncpg.PostgresError, OSError, ConnectionError) as e:
            # Connection-specific errors only - let programming errors fail loudly
            logger.error("failed to create connection pool", error=str(e))
            raise DatabaseConnectionError(f"Failed to connect to PostgreSQL: {e}")

    async def close(self):
        """Close connection pool"""
        await self.pool.close()
        logger.info("connection pool closed")

    async def init_schema(self):
        """Create tables, indexes and constraints. Safe to call repeatedly."""
        schema_path = Path(__file__).parent / "schema_postgres.sql"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        async with self.pool.acquire() as conn:
            await conn.execute(schema_path.read_text())

        logger.info("schema initialized")

    async def ping(self) -> bool:
        """Cheap liveness check for the health endpoint"""
        async with self.pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
