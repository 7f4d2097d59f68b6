"""Ballot API routes - eligibility checks and casting by code or invite link."""

from fastapi import APIRouter, Depends

from database.db_postgres import Database
from server.dependencies import get_db
from server.models.requests import CastBallotRequest, CheckEmployeeRequest, InviteCastRequest
from server.services import ballots as ballot_service
from server.utils.responses import success_response

router = APIRouter(prefix="/api/cycles")

SUBMITTED = "Your vote has been submitted"


@router.post("/{cycle_id}/check-employee")
async def check_employee(
    cycle_id: str, request: CheckEmployeeRequest, db: Database = Depends(get_db)
):
    """Confirm an employee may vote before showing them the ballot."""
    data = await ballot_service.check_employee_eligibility(db, cycle_id, request.employee_code)
    return success_response(data)


@router.post("/{cycle_id}/cast", status_code=201)
async def cast_ballot(cycle_id: str, request: CastBallotRequest, db: Database = Depends(get_db)):
    ballot = await ballot_service.cast_ballot(
        db, cycle_id, request.employee_code, request.nominee_ids
    )
    return success_response({"ballot_id": ballot.id}, message=SUBMITTED)


@router.get("/{cycle_id}/invite/{token}")
async def get_invite(cycle_id: str, token: str, db: Database = Depends(get_db)):
    """Resolve an invite link. Viewing does not use up the link."""
    data = await ballot_service.get_invite_details(db, cycle_id, token)
    return success_response(data)


@router.post("/{cycle_id}/invite/{token}/cast", status_code=201)
async def cast_ballot_with_invite(
    cycle_id: str, token: str, request: InviteCastRequest, db: Database = Depends(get_db)
):
    ballot = await ballot_service.cast_ballot_with_invite(db, cycle_id, token, request.nominee_ids)
    return success_response({"ballot_id": ballot.id}, message=SUBMITTED)
