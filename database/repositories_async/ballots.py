"""Ballot Repository - one immutable ballot per (cycle, voter)

insert_ballot relies on the ballots_cycle_voter_unique constraint: two
concurrent submissions for the same voter race on the index and exactly
one of them gets a row back.
"""

from typing import List, Optional

from asyncpg import Connection

from config import get_logger
from database.id_generation import generate_ballot_id
from database.models import Ballot
from database.repositories_async.base import BaseRepository
from database.repositories_async.helpers import build_ballot

logger = get_logger(__name__).bind(component="ballot_repository")


class BallotRepository(BaseRepository):
    """Repository for ballot operations"""

    async def insert_ballot(
        self,
        cycle_id: str,
        voter_id: str,
        nominee_ids: List[str],
        conn: Optional[Connection] = None,
    ) -> Optional[Ballot]:
        """Insert a ballot unless the voter already has one for this cycle

        Args:
            cycle_id: Cycle the ballot belongs to
            voter_id: Employee casting the ballot
            nominee_ids: Selected nominee ids (already validated)
            conn: Optional connection to join the caller's transaction

        Returns:
            The stored ballot, or None if one already existed
        """
        async with self._ensure_conn(conn) as c:
            row = await c.fetchrow(
                """
                INSERT INTO ballots (id, cycle_id, voter_id, nominee_ids)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (cycle_id, voter_id) DO NOTHING
                RETURNING id, cycle_id, voter_id, nominee_ids, created_at
                """,
                generate_ballot_id(),
                cycle_id,
                voter_id,
                nominee_ids,
            )

        if not row:
            logger.info("duplicate ballot ignored", cycle_id=cycle_id, voter_id=voter_id)
            return None
        return build_ballot(row)

    async def find_ballot(self, cycle_id: str, voter_id: str) -> Optional[Ballot]:
        row = await self._fetchrow(
            """
            SELECT id, cycle_id, voter_id, nominee_ids, created_at
            FROM ballots
            WHERE cycle_id = $1 AND voter_id = $2
            """,
            cycle_id,
            voter_id,
        )
        return build_ballot(row) if row else None

    async def list_ballots(self, cycle_id: str) -> List[Ballot]:
        rows = await self._fetch(
            """
            SELECT id, cycle_id, voter_id, nominee_ids, created_at
            FROM ballots
            WHERE cycle_id = $1
            ORDER BY created_at, id
            """,
            cycle_id,
        )
        return [build_ballot(row) for row in rows]

    async def count_ballots(self, cycle_id: str) -> int:
        return await self._fetchval(
            "SELECT COUNT(*) FROM ballots WHERE cycle_id = $1",
            cycle_id,
        )

    async def delete_all_ballots(self, cycle_id: str) -> int:
        result = await self._execute("DELETE FROM ballots WHERE cycle_id = $1", cycle_id)
        return self._parse_row_count(result)
