"""
Ballot service layer

Two ways in: an employee code typed at a kiosk, or a single-use invite
link. Both run the same eligibility rules from voting.lifecycle and both
rely on the ballot store's unique constraint as the final word on
at-most-one-ballot.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from config import get_logger
from database.db_postgres import Database
from database.models import Ballot, Employee, VoteInvite, VotingCycle
from exceptions import ConflictError, EligibilityError, NotFoundError, ValidationError
from server.metrics import metrics
from server.utils.validation import require_cycle, require_employee_by_code
from voting.lifecycle import (
    Eligibility,
    EligibilityCode,
    check_ballot,
    check_voter,
    check_voting_window,
    normalize_id_list,
    utcnow,
)

logger = get_logger(__name__).bind(component="ballot_service")

ALREADY_VOTED_MESSAGE = "You have already voted in this poll"
INVALID_INVITE_MESSAGE = "Invalid or expired voting link"

_FORBIDDEN = {EligibilityCode.UNAUTHORIZED, EligibilityCode.INVALID_NOMINEE}
_WINDOW = {EligibilityCode.NOT_STARTED, EligibilityCode.ENDED}


def raise_for_verdict(verdict: Eligibility, cycle_id: str, voter_id: Optional[str] = None) -> None:
    """Turn a failed eligibility verdict into the matching domain exception"""
    if verdict.ok:
        return

    metrics.ballot_rejections.labels(reason=verdict.code.value).inc()

    if verdict.code is EligibilityCode.ALREADY_VOTED:
        raise ConflictError(verdict.message, {"cycle_id": cycle_id, "employee_id": voter_id})
    if verdict.code in _FORBIDDEN:
        raise EligibilityError(verdict.message, cycle_id=cycle_id, employee_id=voter_id)
    if verdict.code in _WINDOW:
        raise ValidationError(verdict.message)
    raise ValidationError(verdict.message, field="nominee_ids")


def _cycle_ballot_view(cycle: VotingCycle, nominees: List[Employee]) -> Dict[str, Any]:
    return {
        "id": cycle.id,
        "name": cycle.name,
        "max_votes_per_voter": cycle.max_votes_per_voter,
        "vote_points": cycle.vote_points,
        "nominees": [n.to_dict() for n in nominees],
    }


async def _cycle_nominees(db: Database, cycle: VotingCycle) -> List[Employee]:
    found = await db.directory.get_employees_batch(cycle.nominee_ids)
    return [found[i] for i in cycle.nominee_ids if i in found]


async def _precheck(db: Database, cycle: VotingCycle, voter: Employee, now: datetime) -> Optional[Ballot]:
    """Window, voter and existing-ballot checks shared by every entry point

    Returns the existing ballot, if any, without raising for it so invite
    flows can retire the link before reporting the conflict.
    """
    raise_for_verdict(check_voting_window(cycle, now), cycle.id, voter.id)
    raise_for_verdict(check_voter(cycle, voter.id), cycle.id, voter.id)
    return await db.ballots.find_ballot(cycle.id, voter.id)


def _already_voted(cycle_id: str, voter_id: str) -> ConflictError:
    metrics.ballot_rejections.labels(reason=EligibilityCode.ALREADY_VOTED.value).inc()
    return ConflictError(ALREADY_VOTED_MESSAGE, {"cycle_id": cycle_id, "employee_id": voter_id})


async def check_employee_eligibility(
    db: Database, cycle_id: str, employee_code: str, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """Pre-check before showing the ballot; casting re-checks everything

    Raises:
        NotFoundError: Unknown cycle or employee code
        ValidationError: Voting window closed
        EligibilityError: Employee is not a voter
        ConflictError: Employee already voted
    """
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)
    raise_for_verdict(check_voting_window(cycle, now), cycle.id)

    employee = await require_employee_by_code(db, employee_code)
    if await _precheck(db, cycle, employee, now):
        raise _already_voted(cycle.id, employee.id)

    return {
        "message": "You are eligible to vote",
        "voter": employee.to_dict(),
        "cycle": _cycle_ballot_view(cycle, await _cycle_nominees(db, cycle)),
    }


async def _store_ballot(
    db: Database,
    cycle: VotingCycle,
    voter: Employee,
    nominee_ids: List[str],
    now: datetime,
    invite: Optional[VoteInvite] = None,
) -> Ballot:
    existing = await _precheck(db, cycle, voter, now)
    if existing and invite:
        await db.invites.mark_used(invite.id, now)

    verdict = check_ballot(cycle, voter.id, nominee_ids, existing is not None, now)
    raise_for_verdict(verdict, cycle.id, voter.id)

    if invite is None:
        ballot = await db.ballots.insert_ballot(cycle.id, voter.id, nominee_ids)
    else:
        async with db.ballots.transaction() as conn:
            ballot = await db.ballots.insert_ballot(cycle.id, voter.id, nominee_ids, conn=conn)
            if ballot:
                await db.invites.mark_used(invite.id, now, conn=conn)

    if ballot is None:
        # Lost the race to a concurrent submission for the same voter
        if invite:
            await db.invites.mark_used(invite.id, now)
        raise _already_voted(cycle.id, voter.id)

    channel = "invite" if invite else "code"
    metrics.ballots_cast.labels(channel=channel).inc()
    logger.info(
        "ballot cast",
        cycle_id=cycle.id,
        voter_id=voter.id,
        selections=len(nominee_ids),
        channel=channel,
    )
    return ballot


async def cast_ballot(
    db: Database,
    cycle_id: str,
    employee_code: str,
    nominee_ids: List[str],
    now: Optional[datetime] = None,
) -> Ballot:
    """Cast a ballot identified by employee code"""
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)
    raise_for_verdict(check_voting_window(cycle, now), cycle.id)

    employee = await require_employee_by_code(db, employee_code)
    return await _store_ballot(db, cycle, employee, normalize_id_list(nominee_ids), now)


async def _resolve_invite(
    db: Database, cycle_id: str, token: str
) -> Tuple[VotingCycle, VoteInvite, Employee]:
    invite = await db.invites.get_invite(cycle_id, token)
    if not invite:
        raise NotFoundError(INVALID_INVITE_MESSAGE, entity="invite")

    cycle = await require_cycle(db, cycle_id)

    employees = await db.directory.get_employees_batch([invite.employee_id])
    employee = employees.get(invite.employee_id)
    if not employee:
        raise NotFoundError(INVALID_INVITE_MESSAGE, entity="invite", entity_id=invite.id)

    return cycle, invite, employee


async def get_invite_details(
    db: Database, cycle_id: str, token: str, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """Resolve an invite link to its voter and ballot

    Viewing does not use up the link. It is only retired here when the
    voter turns out to have voted already.
    """
    now = now or utcnow()
    cycle, invite, employee = await _resolve_invite(db, cycle_id, token)

    if await _precheck(db, cycle, employee, now):
        if not invite.used:
            await db.invites.mark_used(invite.id, now)
        raise _already_voted(cycle.id, employee.id)

    locations = await db.directory.get_locations_batch(cycle.location_ids)
    view = _cycle_ballot_view(cycle, await _cycle_nominees(db, cycle))
    view["locations"] = [locations[i].to_dict() for i in cycle.location_ids if i in locations]

    return {
        "message": "You are eligible to vote",
        "voter": employee.to_contact_dict(),
        "cycle": view,
    }


async def cast_ballot_with_invite(
    db: Database,
    cycle_id: str,
    token: str,
    nominee_ids: List[str],
    now: Optional[datetime] = None,
) -> Ballot:
    """Cast a ballot for the voter the invite was issued to

    The ballot insert and marking the invite used share one transaction.
    """
    now = now or utcnow()
    cycle, invite, employee = await _resolve_invite(db, cycle_id, token)
    return await _store_ballot(
        db, cycle, employee, normalize_id_list(nominee_ids), now, invite=invite
    )
