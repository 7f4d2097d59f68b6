"""
Cycle service layer

Create, update and delete voting cycles after checking that every
referenced location, voter and nominee exists and that voters and nominees
belong to the selected locations.
"""

from typing import Any, Dict, List

from config import get_logger
from database.db_postgres import Database
from database.id_generation import generate_cycle_id
from database.models import Employee, VotingCycle
from exceptions import NotFoundError, ValidationError
from server.models.requests import CycleRequest
from server.utils.validation import require_cycle
from voting.lifecycle import check_cycle_membership

logger = get_logger(__name__).bind(component="cycle_service")


async def _resolve_employees(db: Database, ids: List[str], role: str) -> List[Employee]:
    found = await db.directory.get_employees_batch(ids)
    missing = [i for i in ids if i not in found]
    if missing:
        raise ValidationError(
            f"One or more selected {role} do not exist", field=f"{role[:-1]}_ids", value=missing[0]
        )
    return [found[i] for i in ids]


async def validate_references(db: Database, data: CycleRequest) -> None:
    """Raise ValidationError unless the cycle definition is consistent"""
    locations = await db.directory.get_locations_batch(data.location_ids)
    missing = [i for i in data.location_ids if i not in locations]
    if missing:
        raise ValidationError(
            "One or more selected locations do not exist", field="location_ids", value=missing[0]
        )

    voters = await _resolve_employees(db, data.voter_ids, "voters")
    nominees = await _resolve_employees(db, data.nominee_ids, "nominees")

    error = check_cycle_membership(data.location_ids, voters, nominees)
    if error:
        raise ValidationError(error)


def _to_cycle(cycle_id: str, data: CycleRequest) -> VotingCycle:
    return VotingCycle(
        id=cycle_id,
        name=data.name,
        location_ids=data.location_ids,
        start_at=data.start_at,
        end_at=data.end_at,
        voter_ids=data.voter_ids,
        nominee_ids=data.nominee_ids,
        vote_points=data.vote_points,
        max_votes_per_voter=data.max_votes_per_voter,
    )


async def create_cycle(db: Database, data: CycleRequest) -> VotingCycle:
    await validate_references(db, data)

    cycle = await db.cycles.create_cycle(_to_cycle(generate_cycle_id(), data))
    logger.info(
        "cycle created",
        cycle_id=cycle.id,
        locations=len(cycle.location_ids),
        voters=len(cycle.voter_ids),
        nominees=len(cycle.nominee_ids),
    )
    return cycle


async def update_cycle(db: Database, cycle_id: str, data: CycleRequest) -> VotingCycle:
    """Replace a cycle's definition

    Allowed in any state. Existing ballots and announced winners are kept
    as they are.
    """
    await require_cycle(db, cycle_id)
    await validate_references(db, data)

    cycle = await db.cycles.update_cycle(_to_cycle(cycle_id, data))
    if cycle is None:
        # Deleted between the existence check and the update
        raise NotFoundError("Cycle not found", entity="cycle", entity_id=cycle_id)
    return cycle


async def delete_cycle(db: Database, cycle_id: str) -> None:
    await require_cycle(db, cycle_id)
    if not await db.cycles.delete_cycle(cycle_id):
        raise NotFoundError("Cycle not found", entity="cycle", entity_id=cycle_id)


async def get_cycle_voters(db: Database, cycle_id: str) -> Dict[str, Any]:
    """Voters with participation status, sorted by name"""
    cycle = await require_cycle(db, cycle_id)

    voters = await db.directory.get_employees_batch(cycle.voter_ids)
    ballots = {b.voter_id: b for b in await db.ballots.list_ballots(cycle.id)}

    rows = []
    for voter in sorted(voters.values(), key=lambda e: (e.first_name, e.last_name)):
        ballot = ballots.get(voter.id)
        rows.append(
            {
                "employee": voter.to_contact_dict(),
                "has_voted": ballot is not None,
                "voted_at": ballot.created_at.isoformat() if ballot and ballot.created_at else None,
            }
        )

    return {
        "cycle": {
            "id": cycle.id,
            "name": cycle.name,
            "start_at": cycle.start_at.isoformat(),
            "end_at": cycle.end_at.isoformat(),
        },
        "voters": rows,
    }
