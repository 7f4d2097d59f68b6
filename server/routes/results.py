"""Results API routes - tallies, per-store winners, tie-breaks and history."""

from fastapi import APIRouter, Depends

from database.db_postgres import Database
from server.dependencies import get_db
from server.models.requests import AnnounceWinnerRequest
from server.services import results as results_service
from server.utils.responses import list_response, success_response

router = APIRouter(prefix="/api/cycles")


# Registered before the /{cycle_id} routes so "winners" is never read as an id
@router.get("/winners/history")
async def get_winners_history(db: Database = Depends(get_db)):
    """Winners and standings of every ended cycle, most recent first."""
    history = await results_service.build_winners_history(db)
    return list_response(history, key="cycles")


@router.get("/{cycle_id}/report")
async def get_report(cycle_id: str, db: Database = Depends(get_db)):
    report = await results_service.build_report(db, cycle_id)
    return success_response(report)


@router.get("/{cycle_id}/winners")
async def get_winners(cycle_id: str, db: Database = Depends(get_db)):
    """Per-store standings, top nominees, tie flags and official winners.

    Automatic winners only appear once the cycle has ended.
    """
    winners = await results_service.build_winners(db, cycle_id)
    return success_response(winners)


@router.get("/{cycle_id}/official-winners")
async def get_official_winners(cycle_id: str, db: Database = Depends(get_db)):
    winners = await results_service.build_official_winners(db, cycle_id)
    return success_response(winners)


@router.post("/{cycle_id}/announce-winner")
async def announce_winner(
    cycle_id: str, request: AnnounceWinnerRequest, db: Database = Depends(get_db)
):
    """Break a tie at one store by picking one of the top nominees."""
    record = await results_service.announce_winner(
        db, cycle_id, request.location_id, request.nominee_id
    )
    return success_response({"winner": record.to_dict()}, message="Winner announced")
