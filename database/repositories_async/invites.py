"""Invite Repository - single-use voting links"""

from datetime import datetime
from typing import Optional

from asyncpg import Connection

from config import get_logger
from database.id_generation import generate_invite_id
from database.models import VoteInvite
from database.repositories_async.base import BaseRepository
from database.repositories_async.helpers import build_invite

logger = get_logger(__name__).bind(component="invite_repository")


class InviteRepository(BaseRepository):
    """Repository for invite link operations"""

    async def upsert_invite(self, cycle_id: str, employee_id: str, token: str) -> VoteInvite:
        """Issue a fresh token for a voter

        Re-sending an invite rotates the token and clears the used flag, so
        only the newest link works.
        """
        row = await self._fetchrow(
            """
            INSERT INTO vote_invites (id, cycle_id, employee_id, token)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (cycle_id, employee_id)
            DO UPDATE SET token = EXCLUDED.token,
                          used = FALSE,
                          used_at = NULL,
                          created_at = NOW()
            RETURNING id, cycle_id, employee_id, token, used, used_at, created_at
            """,
            generate_invite_id(),
            cycle_id,
            employee_id,
            token,
        )
        return build_invite(row)

    async def get_invite(self, cycle_id: str, token: str) -> Optional[VoteInvite]:
        row = await self._fetchrow(
            """
            SELECT id, cycle_id, employee_id, token, used, used_at, created_at
            FROM vote_invites
            WHERE cycle_id = $1 AND token = $2
            """,
            cycle_id,
            token,
        )
        return build_invite(row) if row else None

    async def mark_used(
        self, invite_id: str, at: datetime, conn: Optional[Connection] = None
    ) -> bool:
        async with self._ensure_conn(conn) as c:
            result = await c.execute(
                """
                UPDATE vote_invites
                SET used = TRUE, used_at = COALESCE(used_at, $2)
                WHERE id = $1
                """,
                invite_id,
                at,
            )
        return self._parse_row_count(result) > 0
