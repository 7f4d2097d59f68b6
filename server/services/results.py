"""
Results service layer

Loads a cycle with its directory references and ballots, runs the tally
and resolver, and shapes report, winners and history responses. Nothing
here is cached: every read recomputes from the stored ballots.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from config import get_logger
from database.db_postgres import Database
from database.models import VotingCycle, WinnerRecord
from exceptions import ValidationError
from server.metrics import metrics
from server.utils.validation import require_cycle
from voting.lifecycle import cycle_status, has_ended, has_started, utcnow
from voting.resolver import (
    LocationResult,
    check_announcement,
    has_unresolved_tie,
    resolve_cycle,
)
from voting.tally import CycleSnapshot, CycleTally, compute_tally

logger = get_logger(__name__).bind(component="results_service")


async def load_snapshot(db: Database, cycle: VotingCycle) -> CycleSnapshot:
    """Resolve the cycle's location and nominee ids, keeping cycle order

    Ids that no longer exist in the directory are dropped.
    """
    locations = await db.directory.get_locations_batch(cycle.location_ids)
    nominees = await db.directory.get_employees_batch(cycle.nominee_ids)

    return CycleSnapshot(
        cycle=cycle,
        locations=[locations[i] for i in cycle.location_ids if i in locations],
        nominees=[nominees[i] for i in cycle.nominee_ids if i in nominees],
    )


async def tally_cycle(db: Database, cycle: VotingCycle) -> Tuple[CycleSnapshot, CycleTally]:
    snapshot = await load_snapshot(db, cycle)
    ballots = await db.ballots.list_ballots(cycle.id)

    with metrics.tally_duration.time():
        tally = compute_tally(snapshot, ballots)
    return snapshot, tally


async def resolve_results(
    db: Database, cycle: VotingCycle, cycle_ended: bool
) -> Tuple[CycleTally, List[LocationResult]]:
    _, tally = await tally_cycle(db, cycle)
    return tally, resolve_cycle(tally, cycle.winners, cycle_ended)


def _timing(cycle: VotingCycle, now: datetime) -> Dict[str, Any]:
    started = has_started(cycle, now)
    ended = has_ended(cycle, now)
    return {
        "has_started": started,
        "has_ended": ended,
        "is_active": started and not ended,
        "status": cycle_status(cycle, now).value,
    }


def _official_dict(result: LocationResult) -> Dict[str, Any]:
    data = result.to_dict()
    return {
        "location_id": data["location_id"],
        "name": data["name"],
        "code": data["code"],
        "total_votes": data["total_votes"],
        "winner": data["winner"],
    }


async def build_report(db: Database, cycle_id: str) -> Dict[str, Any]:
    """Raw tally: cycle header, every nominee, every location total"""
    cycle = await require_cycle(db, cycle_id)
    _, tally = await tally_cycle(db, cycle)
    return tally.to_dict()


async def build_winners(
    db: Database, cycle_id: str, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """Per-location standings with top group, tie flag and official winner"""
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)
    tally, results = await resolve_results(db, cycle, has_ended(cycle, now))

    meta = tally.meta_dict()
    meta.update(_timing(cycle, now))
    meta["results_notified_at"] = (
        cycle.results_notified_at.isoformat() if cycle.results_notified_at else None
    )

    return {
        "cycle": meta,
        "locations": [r.to_dict() for r in results],
    }


async def build_official_winners(
    db: Database, cycle_id: str, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """Only the winner (manual or automatic) of each location"""
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)
    tally, results = await resolve_results(db, cycle, has_ended(cycle, now))

    return {
        "cycle": tally.meta_dict(),
        "locations": [_official_dict(r) for r in results],
    }


async def build_winners_history(
    db: Database, now: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """Every ended cycle, most recently ended first, with winners and standings"""
    now = now or utcnow()
    history = []

    for cycle in await db.cycles.list_ended_cycles(now):
        tally, results = await resolve_results(db, cycle, cycle_ended=True)
        locations = []
        for result in results:
            entry = _official_dict(result)
            entry["nominees"] = result.to_dict()["nominees"]
            locations.append(entry)

        history.append({"cycle": tally.meta_dict(), "locations": locations})

    return history


async def list_cycles_with_stats(
    db: Database, now: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """All cycles, newest first, with participation and tie status

    Tie status is only computed for ended cycles.
    """
    now = now or utcnow()
    cycles = []

    for cycle in await db.cycles.list_cycles():
        total_voters = len(cycle.voter_ids)
        total_ballots = await db.ballots.count_ballots(cycle.id)
        timing = _timing(cycle, now)

        unresolved = False
        if timing["has_ended"]:
            _, results = await resolve_results(db, cycle, cycle_ended=True)
            unresolved = has_unresolved_tie(results)

        data = cycle.to_dict()
        data.update(timing)
        data.update(
            {
                "total_voters": total_voters,
                "total_ballots": total_ballots,
                "remaining_voters": max(total_voters - total_ballots, 0),
                "has_unresolved_tie": unresolved,
            }
        )
        cycles.append(data)

    return cycles


async def announce_winner(
    db: Database,
    cycle_id: str,
    location_id: str,
    nominee_id: str,
    now: Optional[datetime] = None,
) -> WinnerRecord:
    """Record a manual tie-break for one location

    Raises:
        NotFoundError: Unknown cycle
        ValidationError: Any announcement rule fails; nothing is written
    """
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)
    snapshot, tally = await tally_cycle(db, cycle)

    check = check_announcement(snapshot, tally, location_id, nominee_id, now)
    if not check.ok:
        logger.info(
            "winner announcement refused",
            cycle_id=cycle_id,
            location_id=location_id,
            nominee_id=nominee_id,
            reason=check.code.value,
        )
        raise ValidationError(check.reason, field="nominee_id", value=nominee_id)

    record = await db.cycles.upsert_winner(cycle_id, location_id, nominee_id, now)
    metrics.winners_announced.inc()
    logger.info(
        "winner announced",
        cycle_id=cycle_id,
        location_id=location_id,
        nominee_id=nominee_id,
        tied_nominees=len(check.result.top_nominees),
    )
    return record
