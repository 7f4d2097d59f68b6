"""Cycle Repository - voting cycle documents and announced winners

A cycle row holds its location, voter and nominee id arrays. Announced
winners live in cycle_winners and are attached on every read so callers
always see the full document.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from asyncpg import Connection

from config import get_logger
from database.models import VotingCycle, WinnerRecord
from database.repositories_async.base import BaseRepository
from database.repositories_async.helpers import build_cycle, build_winner

logger = get_logger(__name__).bind(component="cycle_repository")

_CYCLE_COLUMNS = """
    id, name, location_ids, start_at, end_at, voter_ids, nominee_ids,
    vote_points, max_votes_per_voter, results_notified_at, created_at, updated_at
"""


class CycleRepository(BaseRepository):
    """Repository for voting cycle operations"""

    async def _fetch_winners(
        self, conn: Connection, cycle_ids: List[str]
    ) -> Dict[str, List[WinnerRecord]]:
        if not cycle_ids:
            return {}

        rows = await conn.fetch(
            """
            SELECT cycle_id, location_id, employee_id, announced_at
            FROM cycle_winners
            WHERE cycle_id = ANY($1::text[])
            ORDER BY announced_at
            """,
            cycle_ids,
        )

        result: Dict[str, List[WinnerRecord]] = defaultdict(list)
        for row in rows:
            result[row["cycle_id"]].append(build_winner(row))
        return dict(result)

    async def _build_cycles(self, conn: Connection, rows) -> List[VotingCycle]:
        winners = await self._fetch_winners(conn, [row["id"] for row in rows])
        return [build_cycle(row, winners.get(row["id"], [])) for row in rows]

    async def create_cycle(self, cycle: VotingCycle) -> VotingCycle:
        """Insert a new cycle. Winners on the passed object are ignored."""
        row = await self._fetchrow(
            f"""
            INSERT INTO voting_cycles (
                id, name, location_ids, start_at, end_at, voter_ids, nominee_ids,
                vote_points, max_votes_per_voter
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            RETURNING {_CYCLE_COLUMNS}
            """,
            cycle.id,
            cycle.name,
            cycle.location_ids,
            cycle.start_at,
            cycle.end_at,
            cycle.voter_ids,
            cycle.nominee_ids,
            cycle.vote_points,
            cycle.max_votes_per_voter,
        )

        logger.info("cycle stored", cycle_id=cycle.id, locations=len(cycle.location_ids))
        return build_cycle(row)

    async def update_cycle(self, cycle: VotingCycle) -> Optional[VotingCycle]:
        """Replace every mutable field of a cycle

        Ballots, invites and announced winners are left untouched.

        Returns:
            Updated cycle, or None if it no longer exists
        """
        async with self.transaction() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE voting_cycles
                SET name = $2,
                    location_ids = $3,
                    start_at = $4,
                    end_at = $5,
                    voter_ids = $6,
                    nominee_ids = $7,
                    vote_points = $8,
                    max_votes_per_voter = $9,
                    updated_at = NOW()
                WHERE id = $1
                RETURNING {_CYCLE_COLUMNS}
                """,
                cycle.id,
                cycle.name,
                cycle.location_ids,
                cycle.start_at,
                cycle.end_at,
                cycle.voter_ids,
                cycle.nominee_ids,
                cycle.vote_points,
                cycle.max_votes_per_voter,
            )
            if not row:
                return None

            cycles = await self._build_cycles(conn, [row])

        logger.info("cycle updated", cycle_id=cycle.id)
        return cycles[0]

    async def delete_cycle(self, cycle_id: str) -> bool:
        """Delete a cycle with its ballots, invites and winners atomically"""
        async with self.transaction() as conn:
            ballots = await conn.execute("DELETE FROM ballots WHERE cycle_id = $1", cycle_id)
            invites = await conn.execute("DELETE FROM vote_invites WHERE cycle_id = $1", cycle_id)
            await conn.execute("DELETE FROM cycle_winners WHERE cycle_id = $1", cycle_id)
            result = await conn.execute("DELETE FROM voting_cycles WHERE id = $1", cycle_id)

        deleted = self._parse_row_count(result) > 0
        if deleted:
            logger.info(
                "cycle deleted",
                cycle_id=cycle_id,
                ballots=self._parse_row_count(ballots),
                invites=self._parse_row_count(invites),
            )
        return deleted

    async def get_cycle(self, cycle_id: str) -> Optional[VotingCycle]:
        """Get cycle by id, winners attached"""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_CYCLE_COLUMNS} FROM voting_cycles WHERE id = $1",
                cycle_id,
            )
            if not row:
                return None
            cycles = await self._build_cycles(conn, [row])
        return cycles[0]

    async def list_cycles(self) -> List[VotingCycle]:
        """All cycles, newest first"""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_CYCLE_COLUMNS} FROM voting_cycles ORDER BY created_at DESC, id"
            )
            return await self._build_cycles(conn, rows)

    async def list_ended_cycles(self, now: datetime) -> List[VotingCycle]:
        """Cycles whose voting window closed before now, most recently ended first"""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_CYCLE_COLUMNS} FROM voting_cycles
                WHERE end_at < $1
                ORDER BY end_at DESC, id
                """,
                now,
            )
            return await self._build_cycles(conn, rows)

    async def upsert_winner(
        self,
        cycle_id: str,
        location_id: str,
        employee_id: str,
        announced_at: datetime,
    ) -> WinnerRecord:
        """Record the announced winner for a location, replacing any previous one"""
        row = await self._fetchrow(
            """
            INSERT INTO cycle_winners (cycle_id, location_id, employee_id, announced_at)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (cycle_id, location_id)
            DO UPDATE SET employee_id = EXCLUDED.employee_id,
                          announced_at = EXCLUDED.announced_at
            RETURNING cycle_id, location_id, employee_id, announced_at
            """,
            cycle_id,
            location_id,
            employee_id,
            announced_at,
        )
        return build_winner(row)

    async def mark_results_notified(self, cycle_id: str, at: datetime) -> bool:
        result = await self._execute(
            """
            UPDATE voting_cycles
            SET results_notified_at = $2, updated_at = NOW()
            WHERE id = $1
            """,
            cycle_id,
            at,
        )
        return self._parse_row_count(result) > 0
