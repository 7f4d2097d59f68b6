"""Seed the directory with demo stores and employees

Locations and employees have no API of their own; this script is how a
fresh database gets a roster. Re-running it is safe: records are keyed by
their codes and updated in place.

Usage:
    uv run scripts/seed_demo.py
    uv run scripts/seed_demo.py --roster roster.json --cycle "March 2026"

Roster JSON shape:
    {
      "locations": [{"name": "Downtown", "code": "DT01"}],
      "employees": [
        {"first_name": "Ana", "last_name": "Ruiz", "employee_code": "E100",
         "email": "ana@example.com", "locations": ["DT01"]}
      ]
    }
"""

import argparse
import asyncio
import json
from datetime import timedelta
from typing import Any, Dict, List

from config import get_logger
from database.db_postgres import Database
from database.id_generation import normalize_code
from database.models import Employee, Location
from server.models.requests import CycleRequest
from server.services.cycles import create_cycle
from voting.lifecycle import utcnow

logger = get_logger(__name__).bind(component="seed")

DEMO_ROSTER: Dict[str, List[Dict[str, Any]]] = {
    "locations": [
        {"name": "Downtown", "code": "DT01"},
        {"name": "Airport", "code": "AP02"},
        {"name": "Harbor", "code": "HB03"},
    ],
    "employees": [
        {"first_name": "Ana", "last_name": "Ruiz", "employee_code": "E100", "locations": ["DT01"]},
        {"first_name": "Ben", "last_name": "Okafor", "employee_code": "E101", "locations": ["DT01"]},
        {"first_name": "Chloe", "last_name": "Nguyen", "employee_code": "E102", "locations": ["DT01", "AP02"]},
        {"first_name": "Dev", "last_name": "Patel", "employee_code": "E103", "locations": ["AP02"]},
        {"first_name": "Erin", "last_name": "Walsh", "employee_code": "E104", "locations": ["AP02"]},
        {"first_name": "Femi", "last_name": "Adeyemi", "employee_code": "E105", "locations": ["HB03"]},
        {"first_name": "Gia", "last_name": "Romano", "employee_code": "E106", "locations": ["HB03"]},
    ],
}


async def seed_roster(db: Database, roster: Dict[str, List[Dict[str, Any]]]) -> Dict[str, List]:
    """Upsert every location, then every employee

    Returns:
        Dict with the stored "locations" and "employees"
    """
    locations: Dict[str, Location] = {}
    for entry in roster.get("locations", []):
        location = await db.directory.add_location(entry["name"], entry["code"])
        locations[location.code] = location

    employees: List[Employee] = []
    for entry in roster.get("employees", []):
        codes = [normalize_code(c) for c in entry.get("locations", [])]
        unknown = [c for c in codes if c not in locations]
        if unknown:
            logger.warning("skipping employee with unknown location", employee_code=entry["employee_code"], locations=unknown)
            continue

        employee = await db.directory.add_employee(
            first_name=entry["first_name"],
            last_name=entry["last_name"],
            employee_code=entry["employee_code"],
            location_ids=[locations[c].id for c in codes],
            email=entry.get("email"),
        )
        employees.append(employee)

    logger.info("roster seeded", locations=len(locations), employees=len(employees))
    return {"locations": list(locations.values()), "employees": employees}


async def main(roster_path: str = None, cycle_name: str = None, days: int = 7):
    roster = DEMO_ROSTER
    if roster_path:
        with open(roster_path) as f:
            roster = json.load(f)

    db = await Database.create()
    try:
        await db.init_schema()
        seeded = await seed_roster(db, roster)

        if cycle_name:
            start = utcnow()
            employee_ids = [e.id for e in seeded["employees"]]
            cycle = await create_cycle(
                db,
                CycleRequest(
                    name=cycle_name,
                    location_ids=[loc.id for loc in seeded["locations"]],
                    start_at=start,
                    end_at=start + timedelta(days=days),
                    voter_ids=employee_ids,
                    nominee_ids=employee_ids,
                ),
            )
            print(f"Created cycle {cycle.id} ({cycle.name}), open for {days} days")

        print(f"Seeded {len(seeded['locations'])} locations and {len(seeded['employees'])} employees")
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo locations and employees")
    parser.add_argument("--roster", help="Path to a roster JSON file (defaults to the built-in demo roster)")
    parser.add_argument("--cycle", help="Also create an active cycle with this name covering everyone")
    parser.add_argument("--days", type=int, default=7, help="Length of the created cycle in days")
    args = parser.parse_args()

    asyncio.run(main(args.roster, args.cycle, args.days))
