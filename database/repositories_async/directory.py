"""Directory Repository - store locations and employees

Read side used by the voting core, plus the create helpers the seed
script uses to populate a fresh database.
"""

from typing import Dict, List, Optional

import asyncpg

from config import get_logger
from database.id_generation import generate_employee_id, generate_location_id, normalize_code
from database.models import Employee, Location
from database.repositories_async.base import BaseRepository
from database.repositories_async.helpers import build_employee, build_location
from exceptions import ConflictError

logger = get_logger(__name__).bind(component="directory_repository")


class DirectoryRepository(BaseRepository):
    """Repository for location and employee lookups"""

    async def get_locations_batch(self, location_ids: List[str]) -> Dict[str, Location]:
        """Batch lookup. Unknown ids are simply absent from the result."""
        if not location_ids:
            return {}

        rows = await self._fetch(
            """
            SELECT id, name, code, created_at
            FROM locations
            WHERE id = ANY($1::text[])
            """,
            list(set(location_ids)),
        )
        return {row["id"]: build_location(row) for row in rows}

    async def get_employees_batch(self, employee_ids: List[str]) -> Dict[str, Employee]:
        if not employee_ids:
            return {}

        rows = await self._fetch(
            """
            SELECT id, first_name, last_name, employee_code, email, location_ids, created_at
            FROM employees
            WHERE id = ANY($1::text[])
            """,
            list(set(employee_ids)),
        )
        return {row["id"]: build_employee(row) for row in rows}

    async def get_employee_by_code(self, employee_code: str) -> Optional[Employee]:
        """Lookup by badge code, ignoring case and whitespace"""
        row = await self._fetchrow(
            """
            SELECT id, first_name, last_name, employee_code, email, location_ids, created_at
            FROM employees
            WHERE employee_code = $1
            """,
            normalize_code(employee_code),
        )
        return build_employee(row) if row else None

    async def get_employees_for_location(self, location_id: str) -> List[Employee]:
        rows = await self._fetch(
            """
            SELECT id, first_name, last_name, employee_code, email, location_ids, created_at
            FROM employees
            WHERE $1 = ANY(location_ids)
            ORDER BY first_name, last_name
            """,
            location_id,
        )
        return [build_employee(row) for row in rows]

    async def add_location(self, name: str, code: str) -> Location:
        """Create or rename a location keyed by its code

        Raises:
            ConflictError: If another location already uses this name
        """
        try:
            row = await self._fetchrow(
                """
                INSERT INTO locations (id, name, code)
                VALUES ($1, $2, $3)
                ON CONFLICT (id) DO UPDATE SET name = EXCLUDED.name
                RETURNING id, name, code, created_at
                """,
                generate_location_id(code),
                name.strip(),
                normalize_code(code),
            )
        except asyncpg.UniqueViolationError:
            raise ConflictError(f"Location name already in use: {name}", {"code": code})

        logger.info("location stored", location_id=row["id"], code=row["code"])
        return build_location(row)

    async def add_employee(
        self,
        first_name: str,
        last_name: str,
        employee_code: str,
        location_ids: List[str],
        email: Optional[str] = None,
    ) -> Employee:
        """Create or update an employee keyed by badge code

        Raises:
            ConflictError: If the email belongs to another employee
        """
        try:
            row = await self._fetchrow(
                """
                INSERT INTO employees (id, first_name, last_name, employee_code, email, location_ids)
                VALUES ($1, $2, $3, $4, $5, $6)
                ON CONFLICT (id) DO UPDATE
                SET first_name = EXCLUDED.first_name,
                    last_name = EXCLUDED.last_name,
                    email = EXCLUDED.email,
                    location_ids = EXCLUDED.location_ids
                RETURNING id, first_name, last_name, employee_code, email, location_ids, created_at
                """,
                generate_employee_id(employee_code),
                first_name.strip(),
                last_name.strip(),
                normalize_code(employee_code),
                email.strip().lower() if email else None,
                location_ids,
            )
        except asyncpg.UniqueViolationError:
            raise ConflictError(
                f"Email already in use: {email}", {"employee_code": employee_code}
            )

        logger.info("employee stored", employee_id=row["id"], locations=len(location_ids))
        return build_employee(row)
