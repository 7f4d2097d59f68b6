"""Cycle API routes - create, edit, delete and list voting cycles."""

from fastapi import APIRouter, Depends

from database.db_postgres import Database
from server.dependencies import get_db
from server.models.requests import CycleRequest
from server.services import cycles as cycle_service
from server.services.results import list_cycles_with_stats
from server.utils.responses import list_response, success_response

router = APIRouter(prefix="/api/cycles")


@router.get("")
async def list_cycles(db: Database = Depends(get_db)):
    """All cycles, newest first, with participation and tie status."""
    cycles = await list_cycles_with_stats(db)
    return list_response(cycles, key="cycles")


@router.post("", status_code=201)
async def create_cycle(request: CycleRequest, db: Database = Depends(get_db)):
    cycle = await cycle_service.create_cycle(db, request)
    return success_response({"cycle": cycle.to_dict()}, message="Cycle created")


@router.put("/{cycle_id}")
async def update_cycle(cycle_id: str, request: CycleRequest, db: Database = Depends(get_db)):
    cycle = await cycle_service.update_cycle(db, cycle_id, request)
    return success_response({"cycle": cycle.to_dict()}, message="Cycle updated")


@router.delete("/{cycle_id}")
async def delete_cycle(cycle_id: str, db: Database = Depends(get_db)):
    """Delete a cycle with its ballots, invites and announced winners."""
    await cycle_service.delete_cycle(db, cycle_id)
    return success_response({}, message="Cycle deleted")


@router.get("/{cycle_id}/voters")
async def get_cycle_voters(cycle_id: str, db: Database = Depends(get_db)):
    """Who has voted and who has not."""
    data = await cycle_service.get_cycle_voters(db, cycle_id)
    return success_response(data)
