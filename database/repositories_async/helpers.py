"""Repository helper functions for object construction."""

from typing import Any, List, Optional

from database.models import (
    Ballot,
    Employee,
    Location,
    VoteInvite,
    VotingCycle,
    WinnerRecord,
)


def build_location(row: Any) -> Location:
    return Location(
        id=row["id"],
        name=row["name"],
        code=row["code"],
        created_at=row["created_at"],
    )


def build_employee(row: Any) -> Employee:
    return Employee(
        id=row["id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        employee_code=row["employee_code"],
        email=row["email"],
        location_ids=list(row["location_ids"] or []),
        created_at=row["created_at"],
    )


def build_winner(row: Any) -> WinnerRecord:
    return WinnerRecord(
        cycle_id=row["cycle_id"],
        location_id=row["location_id"],
        employee_id=row["employee_id"],
        announced_at=row["announced_at"],
    )


def build_cycle(row: Any, winners: Optional[List[WinnerRecord]] = None) -> VotingCycle:
    """Construct VotingCycle from database row plus its winner rows."""
    return VotingCycle(
        id=row["id"],
        name=row["name"],
        location_ids=list(row["location_ids"] or []),
        start_at=row["start_at"],
        end_at=row["end_at"],
        voter_ids=list(row["voter_ids"] or []),
        nominee_ids=list(row["nominee_ids"] or []),
        vote_points=row["vote_points"],
        max_votes_per_voter=row["max_votes_per_voter"],
        winners=winners or [],
        results_notified_at=row["results_notified_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def build_ballot(row: Any) -> Ballot:
    return Ballot(
        id=row["id"],
        cycle_id=row["cycle_id"],
        voter_id=row["voter_id"],
        nominee_ids=list(row["nominee_ids"] or []),
        created_at=row["created_at"],
    )


def build_invite(row: Any) -> VoteInvite:
    return VoteInvite(
        id=row["id"],
        cycle_id=row["cycle_id"],
        employee_id=row["employee_id"],
        token=row["token"],
        used=row["used"],
        used_at=row["used_at"],
        created_at=row["created_at"],
    )
